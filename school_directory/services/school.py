import re

from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.orm import Session

from school_directory.core.errors import Forbidden, NotFound, ValidationError
from school_directory.core.logger import get_logger
from school_directory.models.school import School
from school_directory.models.user import User

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTACT_RE = re.compile(r"[0-9]+")
# Upper bound of the BIGINT contact column.
CONTACT_MAX = 2 ** 63 - 1
REQUIRED_FIELDS = ("name", "address", "city", "state", "contact", "email_id")
SEARCH_MAX_LENGTH = 100


def validate_school_fields(fields: dict) -> dict:
    """Return a cleaned copy of ``fields`` ready for insert/update.

    Raises ValidationError on the first problem found. Nothing here touches
    the database.
    """
    cleaned = {}
    for key in REQUIRED_FIELDS:
        value = fields.get(key)
        value = str(value).strip() if value is not None else ""
        if not value:
            raise ValidationError("All fields are required")
        cleaned[key] = value

    if not EMAIL_RE.match(cleaned["email_id"]):
        raise ValidationError("Invalid email format")

    if not CONTACT_RE.fullmatch(cleaned["contact"]):
        raise ValidationError("Invalid contact number")
    contact = int(cleaned["contact"])
    if contact <= 0 or contact > CONTACT_MAX:
        raise ValidationError("Invalid contact number")
    cleaned["contact"] = contact

    image = fields.get("image")
    if isinstance(image, str) and image.strip():
        cleaned["image"] = image.strip()
    else:
        cleaned["image"] = None
    return cleaned


def _school_query():
    return select(School, User.email.label("created_by_email")).outerjoin(
        User, School.created_by == User.id
    )


def serialize(school: School, created_by_email: str | None) -> dict:
    return {
        "id": school.id,
        "name": school.name,
        "address": school.address,
        "city": school.city,
        "state": school.state,
        "contact": school.contact,
        "image": school.image,
        "email_id": school.email_id,
        "created_by": school.created_by,
        "created_by_email": created_by_email,
        "created_at": school.created_at,
        "updated_at": school.updated_at,
    }


def list_schools(db: Session, search: str | None = None, owner_id: int | None = None) -> list[dict]:
    query = _school_query()

    if owner_id is not None:
        query = query.where(School.created_by == owner_id)

    if search is not None and search.strip():
        search = search.strip()
        if len(search) > SEARCH_MAX_LENGTH:
            raise ValidationError(
                f"Search query too long. Maximum {SEARCH_MAX_LENGTH} characters allowed."
            )
        needle = search.lower()
        query = query.where(or_(
            func.lower(School.name).contains(needle, autoescape=True),
            func.lower(School.address).contains(needle, autoescape=True),
            func.lower(School.city).contains(needle, autoescape=True),
            func.lower(School.state).contains(needle, autoescape=True),
            func.lower(School.email_id).contains(needle, autoescape=True),
            cast(School.contact, String).contains(needle, autoescape=True),
            func.lower(User.email).contains(needle, autoescape=True),
        ))

    rows = db.execute(query.order_by(School.created_at.desc(), School.id.desc())).all()
    return [serialize(school, email) for school, email in rows]


def get_school(db: Session, school_id: int) -> dict:
    row = db.execute(_school_query().where(School.id == school_id)).first()
    if not row:
        raise NotFound("School not found")
    school, email = row
    return serialize(school, email)


def create_school(db: Session, fields: dict, owner_id: int) -> dict:
    cleaned = validate_school_fields(fields)

    school = School(created_by=owner_id, **cleaned)
    db.add(school)
    db.commit()
    db.refresh(school)

    logger.info("school_created", school_id=school.id, user_id=owner_id)
    return get_school(db, school.id)


def _ownership_failure(db: Session, school_id: int, action: str):
    # Only reached after the guarded statement matched no row.
    if db.get(School, school_id) is None:
        return NotFound("School not found")
    return Forbidden(f"You can only {action} schools you created")


def update_school(db: Session, school_id: int, fields: dict, owner_id: int) -> dict:
    cleaned = validate_school_fields(fields)

    result = db.execute(
        update(School)
        .where(School.id == school_id, School.created_by == owner_id)
        .values(**cleaned)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise _ownership_failure(db, school_id, "edit")
    db.commit()

    logger.info("school_updated", school_id=school_id, user_id=owner_id)
    return get_school(db, school_id)


def delete_school(db: Session, school_id: int, owner_id: int) -> None:
    result = db.execute(
        delete(School)
        .where(School.id == school_id, School.created_by == owner_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise _ownership_failure(db, school_id, "delete")
    db.commit()

    logger.info("school_deleted", school_id=school_id, user_id=owner_id)
