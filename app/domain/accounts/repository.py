"""Account repository - Database operations for student and salon profiles"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from ...models import Salon, Student
from ...shared.validators import is_school_email

STUDENT_METADATA_FIELDS = ("name", "school_name", "instagram_url", "avatar_url")
SALON_METADATA_FIELDS = ("salon_name", "description", "address", "phone_number", "photo_url")


class AccountRepository:
    """Repository for profile database operations"""

    @staticmethod
    def get_student(db: Session, user_id: str) -> Optional[Student]:
        return db.query(Student).filter(Student.id == user_id).first()

    @staticmethod
    def get_salon(db: Session, user_id: str) -> Optional[Salon]:
        return db.query(Salon).filter(Salon.id == user_id).first()

    @staticmethod
    def provision_student(db: Session, user_id: str, email: str, metadata: dict) -> Student:
        """Create a student profile from signup metadata"""
        fields = {key: metadata.get(key) for key in STUDENT_METADATA_FIELDS if metadata.get(key)}
        if not fields.get("name"):
            raise ValueError("Signup metadata is missing the student name")
        student = Student(
            id=user_id,
            email=email,
            is_verified=is_school_email(email),
            **fields,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    @staticmethod
    def provision_salon(db: Session, user_id: str, email: str, metadata: dict) -> Salon:
        """Create a salon profile from signup metadata"""
        fields = {key: metadata.get(key) for key in SALON_METADATA_FIELDS if metadata.get(key)}
        if not fields.get("salon_name"):
            raise ValueError("Signup metadata is missing the salon name")
        salon = Salon(id=user_id, email=email, **fields)
        db.add(salon)
        db.commit()
        db.refresh(salon)
        return salon

    @staticmethod
    def update_profile(db: Session, profile: Union[Student, Salon], **updates) -> Union[Student, Salon]:
        """Apply the provided fields; explicit None clears an optional field"""
        for key, value in updates.items():
            if hasattr(profile, key):
                setattr(profile, key, value)

        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def delete_profile(db: Session, profile: Union[Student, Salon]) -> None:
        """Delete a profile and everything it owns"""
        db.delete(profile)
        db.commit()
