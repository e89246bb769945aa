from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Double, Enum, ForeignKeyConstraint, Index, Integer, PrimaryKeyConstraint, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import uuid

from .db_enums import (
    Program, Shift, GuardianRole, EnrollmentStatus, StudentStatus, ContactType,
    BillingType, SubscriptionStatus, EducationLevel, GradeLevel, DetectionMethod
)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


class Persons(Base):
    __tablename__ = 'persons'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='persons_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    date_of_birth: Mapped[Optional[datetime.date]] = mapped_column(Date)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    contact_points: Mapped[list['ContactPoints']] = relationship('ContactPoints', back_populates='person')
    program_profiles: Mapped[list['ProgramProfiles']] = relationship('ProgramProfiles', back_populates='person')


class ContactPoints(Base):
    __tablename__ = 'contact_points'
    __table_args__ = (
        ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE', name='contact_points_person_id_fkey'),
        PrimaryKeyConstraint('id', name='contact_points_pkey'),
        UniqueConstraint('type', 'value', name='contact_points_type_value_key'),
        Index('idx_contact_points_person_id', 'person_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    type: Mapped[str] = mapped_column(Enum(*ContactType.get_all_names(), name='contact_type_enum'))
    # Emails are stored lowercased, phones as digits only.
    value: Mapped[str] = mapped_column(Text)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    person: Mapped['Persons'] = relationship('Persons', back_populates='contact_points')


class Batches(Base):
    __tablename__ = 'batches'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='batches_pkey'),
        UniqueConstraint('name', name='batches_name_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    capacity: Mapped[Optional[int]] = mapped_column(Integer)
    start_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class ProgramProfiles(Base):
    __tablename__ = 'program_profiles'
    __table_args__ = (
        ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE', name='program_profiles_person_id_fkey'),
        PrimaryKeyConstraint('id', name='program_profiles_pkey'),
        UniqueConstraint('person_id', 'program', name='program_profiles_person_id_program_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    program: Mapped[str] = mapped_column(Enum(*Program.get_all_names(), name='program_enum'))
    status: Mapped[str] = mapped_column(Enum(*EnrollmentStatus.get_all_names(), name='enrollment_status_enum'), default=EnrollmentStatus.REGISTERED.value)
    education_level: Mapped[Optional[str]] = mapped_column(Enum(*EducationLevel.get_all_names(), name='education_level_enum'))
    grade_level: Mapped[Optional[str]] = mapped_column(Enum(*GradeLevel.get_all_names(), name='grade_level_enum'))
    school_name: Mapped[Optional[str]] = mapped_column(Text)
    monthly_rate: Mapped[Optional[int]] = mapped_column(Integer)
    custom_rate: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    person: Mapped['Persons'] = relationship('Persons', back_populates='program_profiles')
    enrollments: Mapped[list['Enrollments']] = relationship('Enrollments', back_populates='program_profile')


class Enrollments(Base):
    __tablename__ = 'enrollments'
    __table_args__ = (
        ForeignKeyConstraint(['program_profile_id'], ['program_profiles.id'], ondelete='CASCADE', name='enrollments_program_profile_id_fkey'),
        ForeignKeyConstraint(['batch_id'], ['batches.id'], ondelete='SET NULL', name='enrollments_batch_id_fkey'),
        PrimaryKeyConstraint('id', name='enrollments_pkey'),
        Index('idx_enrollments_batch_id', 'batch_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    program_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    batch_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    status: Mapped[str] = mapped_column(Enum(*EnrollmentStatus.get_all_names(), name='enrollment_status_enum'), default=EnrollmentStatus.REGISTERED.value)
    start_date: Mapped[datetime.date] = mapped_column(Date, default=datetime.date.today)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date)

    program_profile: Mapped['ProgramProfiles'] = relationship('ProgramProfiles', back_populates='enrollments')


class Teachers(Base):
    __tablename__ = 'teachers'
    __table_args__ = (
        ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE', name='teachers_person_id_fkey'),
        PrimaryKeyConstraint('id', name='teachers_pkey'),
        UniqueConstraint('person_id', name='teachers_person_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class TeacherAssignments(Base):
    __tablename__ = 'teacher_assignments'
    __table_args__ = (
        ForeignKeyConstraint(['program_profile_id'], ['program_profiles.id'], ondelete='CASCADE', name='teacher_assignments_program_profile_id_fkey'),
        ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE', name='teacher_assignments_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='teacher_assignments_pkey'),
        Index('idx_teacher_assignments_profile_shift', 'program_profile_id', 'shift')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    program_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    shift: Mapped[str] = mapped_column(Enum(*Shift.get_all_names(), name='shift_enum'))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    start_date: Mapped[datetime.date] = mapped_column(Date, default=datetime.date.today)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date)


class GuardianRelationships(Base):
    __tablename__ = 'guardian_relationships'
    __table_args__ = (
        CheckConstraint('guardian_id <> dependent_id', name='guardian_not_self'),
        ForeignKeyConstraint(['guardian_id'], ['persons.id'], ondelete='CASCADE', name='guardian_relationships_guardian_id_fkey'),
        ForeignKeyConstraint(['dependent_id'], ['persons.id'], ondelete='CASCADE', name='guardian_relationships_dependent_id_fkey'),
        PrimaryKeyConstraint('id', name='guardian_relationships_pkey')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    guardian_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    dependent_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    role: Mapped[str] = mapped_column(Enum(*GuardianRole.get_all_names(), name='guardian_role_enum'), default=GuardianRole.PARENT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    guardian: Mapped['Persons'] = relationship('Persons', foreign_keys=[guardian_id])
    dependent: Mapped['Persons'] = relationship('Persons', foreign_keys=[dependent_id])


class SiblingRelationships(Base):
    __tablename__ = 'sibling_relationships'
    __table_args__ = (
        CheckConstraint('person1_id < person2_id', name='sibling_ordered_pair'),
        ForeignKeyConstraint(['person1_id'], ['persons.id'], ondelete='CASCADE', name='sibling_relationships_person1_id_fkey'),
        ForeignKeyConstraint(['person2_id'], ['persons.id'], ondelete='CASCADE', name='sibling_relationships_person2_id_fkey'),
        PrimaryKeyConstraint('id', name='sibling_relationships_pkey'),
        UniqueConstraint('person1_id', 'person2_id', name='sibling_relationships_person1_id_person2_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person1_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    person2_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    detection_method: Mapped[str] = mapped_column(Enum(*DetectionMethod.get_all_names(), name='detection_method_enum'), default=DetectionMethod.MANUAL.value)
    confidence: Mapped[Optional[float]] = mapped_column(Double(53))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    person1: Mapped['Persons'] = relationship('Persons', foreign_keys=[person1_id])
    person2: Mapped['Persons'] = relationship('Persons', foreign_keys=[person2_id])


class Subscriptions(Base):
    __tablename__ = 'subscriptions'
    __table_args__ = (
        CheckConstraint('amount >= 0', name='subscription_amount_non_negative'),
        PrimaryKeyConstraint('id', name='subscriptions_pkey'),
        UniqueConstraint('stripe_subscription_id', name='subscriptions_stripe_subscription_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    stripe_subscription_id: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(Enum(*SubscriptionStatus.get_all_names(), name='subscription_status_enum'))
    # Minor currency units (cents).
    amount: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class BillingAssignments(Base):
    __tablename__ = 'billing_assignments'
    __table_args__ = (
        ForeignKeyConstraint(['subscription_id'], ['subscriptions.id'], ondelete='CASCADE', name='billing_assignments_subscription_id_fkey'),
        ForeignKeyConstraint(['program_profile_id'], ['program_profiles.id'], ondelete='CASCADE', name='billing_assignments_program_profile_id_fkey'),
        PrimaryKeyConstraint('id', name='billing_assignments_pkey'),
        Index('idx_billing_assignments_subscription_id', 'subscription_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    subscription_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    program_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    amount: Mapped[int] = mapped_column(Integer)
    percentage: Mapped[Optional[float]] = mapped_column(Double(53))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class Students(Base):
    __tablename__ = 'students'
    __table_args__ = (
        ForeignKeyConstraint(['batch_id'], ['batches.id'], ondelete='SET NULL', name='students_batch_id_fkey'),
        ForeignKeyConstraint(['subscription_id'], ['subscriptions.id'], ondelete='SET NULL', name='students_subscription_id_fkey'),
        PrimaryKeyConstraint('id', name='students_pkey'),
        Index('idx_students_email', 'email')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    date_of_birth: Mapped[Optional[datetime.date]] = mapped_column(Date)
    education_level: Mapped[Optional[str]] = mapped_column(Enum(*EducationLevel.get_all_names(), name='education_level_enum'))
    grade_level: Mapped[Optional[str]] = mapped_column(Enum(*GradeLevel.get_all_names(), name='grade_level_enum'))
    school_name: Mapped[Optional[str]] = mapped_column(Text)
    batch_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    subscription_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    status: Mapped[str] = mapped_column(Enum(*StudentStatus.get_all_names(), name='enrollment_status_enum'), default=StudentStatus.REGISTERED.value)
    billing_type: Mapped[Optional[str]] = mapped_column(Enum(*BillingType.get_all_names(), name='billing_type_enum'))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    subscription: Mapped[Optional['Subscriptions']] = relationship('Subscriptions')
