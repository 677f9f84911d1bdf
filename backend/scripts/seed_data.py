"""
Seed script to generate synthetic profiles, clients, inventory and invoices for demo purposes
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.auth import UserContext
from app.database import SessionLocal, engine, Base
from app.models.profile import Profile
from app.models.client import Client
from app.models.inventory_item import InventoryItem
from app.schemas.invoice import InvoiceItemCreate, InvoiceStatus, InvoiceSubmission
from app.services import invoice_service
from app.services.invoice_editor import generate_invoice_number
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker

fake = Faker()

CATALOG = [
    ("Steel Beam", "Structural", "I-beam, 6m, grade S355"),
    ("Steel Plate", "Sheet", "10mm hot rolled plate, 2x1m"),
    ("Rebar Bundle", "Reinforcement", "12mm rebar, bundle of 50"),
    ("Angle Iron", "Structural", "50x50x5 equal angle, 6m"),
    ("Square Tube", "Tubing", "40x40x3 hollow section, 6m"),
    ("Welding Rods", "Consumables", "E6013 3.2mm, 5kg box"),
    ("Anchor Bolts", "Fasteners", "M16 galvanised, box of 25"),
    ("Expanded Mesh", "Sheet", "Diamond mesh panel 2.4x1.2m"),
]


def create_profiles(db: Session, count: int = 2) -> list[Profile]:
    """Create synthetic user profiles"""
    profiles = []
    for _ in range(count):
        profile = Profile(
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            email=fake.email()
        )
        db.add(profile)
        profiles.append(profile)
    db.commit()
    return profiles


def create_clients(db: Session, owner: Profile, count: int = 6) -> list[Client]:
    """Create synthetic clients owned by one profile"""
    clients = []
    for _ in range(count):
        client = Client(
            user_id=owner.id,
            company_name=fake.company(),
            contact_name=fake.name(),
            email=fake.company_email(),
            phone=fake.phone_number(),
            address=fake.address().replace("\n", ", ")
        )
        db.add(client)
        clients.append(client)
    db.commit()
    return clients


def create_inventory(db: Session) -> list[InventoryItem]:
    """Create the demo inventory catalog"""
    items = []
    for name, category, description in CATALOG:
        item = InventoryItem(
            name=name,
            category=category,
            description=description,
            unit_price=Decimal(str(round(fake.random.uniform(15.0, 450.0), 2))),
            quantity=fake.random_int(min=20, max=200)
        )
        db.add(item)
        items.append(item)
    db.commit()
    return items


def create_invoices(db: Session, owner: Profile, clients: list[Client], inventory: list[InventoryItem], count: int = 10):
    """Create invoices through the invoice service so stock is decremented"""
    context = UserContext(user_id=owner.id)
    invoices = []
    for _ in range(count):
        issue_date = date.today() - timedelta(days=fake.random_int(min=0, max=60))
        lines = []
        for item in fake.random_elements(elements=inventory, length=fake.random_int(min=1, max=3), unique=True):
            db.refresh(item)
            if item.quantity < 1:
                continue
            lines.append(InvoiceItemCreate(
                inventory_id=item.id,
                description=item.name,
                quantity=fake.random_int(min=1, max=min(item.quantity, 10)),
                unit_price=item.unit_price
            ))
        if not lines:
            continue

        submission = InvoiceSubmission(
            client_id=fake.random_element(elements=clients).id,
            invoice_number=generate_invoice_number(),
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=30),
            notes=fake.sentence(),
            status=fake.random_element(elements=list(InvoiceStatus)),
            items=lines
        )
        invoices.append(invoice_service.create_invoice(db, context, submission))
    return invoices


def main():
    """Main seeding function"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        print("Creating profiles...")
        profiles = create_profiles(db)
        owner = profiles[0]
        print(f"Created {len(profiles)} profiles (invoices owned by profile {owner.id})")

        print("Creating clients...")
        clients = create_clients(db, owner)
        print(f"Created {len(clients)} clients")

        print("Creating inventory...")
        inventory = create_inventory(db)
        print(f"Created {len(inventory)} inventory items")

        print("Creating invoices...")
        invoices = create_invoices(db, owner, clients, inventory)
        print(f"Created {len(invoices)} invoices")

        print("\nSeeding complete!")
        print(f"Use header X-User-Id: {owner.id} to browse the seeded records")

    except Exception as e:
        print(f"Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
