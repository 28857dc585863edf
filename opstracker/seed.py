"""
Database seeding for the default service catalogue
"""
from sqlalchemy.orm import Session

from opstracker.models import Service, ServiceCategory


PRIMARY_SERVICES = [
    "FCR", "VPN", "SOC Alerts", "USB/CD", "URL Filtering", "IoCs", "CTI Feeds",
    "Threat Analysis", "Vulnerabilities", "Sec Support", "Ticket",
    "Technical Meeting", "Sec Investigations",
]

SECONDARY_SERVICES = [
    "Sec Policy Changes", "Sec Solution Administration", "Sec Troubleshooting",
    "Sec Implement", "Cyber Infra", "IT Infra Review", "Sec Control Modifications",
    "Architect Review", "Review Cyber Control", "Health Check", "New HLD", "New LLD",
    "GAP Analysis", "RFP", "CAB", "Projects", "Reporting", "Compliance", "CR", "BRD",
    "OTHER",
]


def seed_services(db: Session):
    """Seed the service catalogue"""
    catalogue = (
        [(name, ServiceCategory.PRIMARY) for name in PRIMARY_SERVICES]
        + [(name, ServiceCategory.SECONDARY) for name in SECONDARY_SERVICES]
    )

    existing = {name for (name,) in db.query(Service.name).all()}
    for name, category in catalogue:
        if name not in existing:
            db.add(Service(name=name, category=category, count=0))

    db.commit()


def seed_database(db: Session):
    """Seed all initial data"""
    seed_services(db)
