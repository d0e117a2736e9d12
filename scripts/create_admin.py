import argparse
import getpass
import sys
import uuid
from datetime import datetime
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hr_portal.core.security import hash_password
from hr_portal.database import engine, init_db
from hr_portal.models.user import Role, User
from sqlmodel import Session, select


def ensure_admin(session: Session, email: str, name: str, password: str) -> User:
    """Create an administrator, or promote and reactivate an existing account."""
    email_norm = email.strip().lower()
    now = datetime.utcnow()
    user = session.exec(select(User).where(User.email == email_norm)).first()
    if user is None:
        user = User(
            id=uuid.uuid4(),
            email=email_norm,
            name=name,
            hashed_password=hash_password(password),
            role=Role.ADMIN.value,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
    else:
        user.role = Role.ADMIN.value
        user.is_active = True
        user.updated_at = now
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def main():
    parser = argparse.ArgumentParser(description="Create or promote an HR portal administrator")
    parser.add_argument("email")
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must have at least 8 characters.")
        sys.exit(1)

    init_db()
    with Session(engine) as session:
        user = ensure_admin(session, args.email, args.name, password)
    print(f"Administrator ready: {user.email} ({user.id})")


if __name__ == "__main__":
    main()
