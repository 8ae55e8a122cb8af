"""StateStore - Main API for State Store operations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, Select, and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examcell.auth.models import Role
from examcell.grading import ResultRecord, aggregate_results, grade_for_components, total_marks
from examcell.state_store.database import Database
from examcell.state_store.exceptions import (
    BonafideNotFoundError,
    DuplicateError,
    InvalidStateTransitionError,
    MarkNotFoundError,
    QueryNotFoundError,
    StudentExistsError,
    StudentNotFoundError,
    SubjectExistsError,
    SubjectNotFoundError,
    TeacherNotFoundError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)
from examcell.state_store.models import (
    DEFAULT_EXAM_TYPE,
    OTHER_PURPOSE,
    BonafideRequest,
    BonafideStatus,
    ContactMessage,
    DashboardStats,
    Mark,
    Page,
    Query,
    QueryPriority,
    QueryStatus,
    RevokedToken,
    Student,
    StudentDashboard,
    Subject,
    Teacher,
    TeacherDashboard,
    User,
)

logger = logging.getLogger("examcell.state_store")

M = TypeVar("M")

OPEN_QUERY_STATES = (QueryStatus.OPEN.value, QueryStatus.IN_PROGRESS.value)
RECENT_LIMIT = 5

# (roll_no, internal1, internal2, external)
MarkRow = tuple[str, float, float, float]


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _like(term: str) -> str:
    return f"%{term.strip()}%"


class StateStore:
    """Main API for State Store operations.

    Every method opens and closes its own session; returned ORM objects are
    detached with their many-to-one relations already loaded.
    """

    def __init__(self, db_path: str = "examcell.db") -> None:
        """Initialize State Store with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @property
    def database(self) -> Database:
        return self._db

    # --- Helpers ---

    @staticmethod
    def _paginate(session: Session, stmt: Select[Any], page: int, size: int) -> Page[Any]:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = session.execute(count_stmt).scalar_one()
        rows = session.execute(stmt.limit(size).offset(page * size)).scalars().all()
        return Page(content=list(rows), total_elements=total, size=size, number=page)

    @staticmethod
    def _require_student(session: Session, student_id: str) -> Student:
        student = session.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id '{student_id}' not found")
        return student

    @staticmethod
    def _require_subject(session: Session, subject_id: str) -> Subject:
        subject = session.get(Subject, subject_id)
        if subject is None:
            raise SubjectNotFoundError(f"Subject with id '{subject_id}' not found")
        return subject

    @staticmethod
    def _require_query(session: Session, query_id: str) -> Query:
        query = session.get(Query, query_id)
        if query is None:
            raise QueryNotFoundError(f"Query with id '{query_id}' not found")
        return query

    @staticmethod
    def _require_bonafide(session: Session, request_id: str) -> BonafideRequest:
        request = session.get(BonafideRequest, request_id)
        if request is None:
            raise BonafideNotFoundError(f"Bonafide request with id '{request_id}' not found")
        return request

    @staticmethod
    def _reload(session: Session, model: type[M], ident: str) -> M:
        """Re-read a row so eager relations are populated before detaching."""
        obj = session.get(model, ident, populate_existing=True)
        assert obj is not None
        return obj

    # --- User Operations ---

    def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        full_name: str,
        role: Role,
        roll_no: str | None = None,
        semester: int | None = None,
        department: str | None = None,
        phone_number: str | None = None,
        address: str | None = None,
        employee_id: str | None = None,
        designation: str | None = None,
        specialization: str | None = None,
    ) -> User:
        """Create a login account and its role profile in one transaction.

        Students get a Student profile (roll_no and semester required),
        teachers get a Teacher profile, admins get none.

        Args:
            email: Login email (unique, case-insensitive)
            username: Display handle
            password_hash: Already hashed password
            full_name: Full name, copied to the profile
            role: Account role
            roll_no: Student roll number
            semester: Student's current semester
            department: Student or teacher department
            phone_number: Student phone number
            address: Student address
            employee_id: Teacher employee id
            designation: Teacher designation
            specialization: Teacher specialization

        Returns:
            The created User with its profile loaded

        Raises:
            UserExistsError: If the email is taken
            StudentExistsError: If the roll number is taken
            ValidationError: If student fields are missing
        """
        if role is Role.STUDENT and (not roll_no or semester is None):
            raise ValidationError("Students need a roll number and a semester")

        session = self._db.get_session()
        try:
            normalized = email.strip().lower()
            if session.execute(select(User.id).where(User.email == normalized)).first():
                raise UserExistsError(f"User with email '{normalized}' already exists")

            user = User(
                email=normalized,
                username=username,
                password_hash=password_hash,
                full_name=full_name,
                role=role.value,
            )
            session.add(user)

            if role is Role.STUDENT:
                assert roll_no is not None and semester is not None
                if session.execute(select(Student.id).where(Student.roll_no == roll_no)).first():
                    raise StudentExistsError(f"Student with roll number '{roll_no}' already exists")
                session.add(
                    Student(
                        roll_no=roll_no,
                        name=full_name,
                        email=normalized,
                        semester=semester,
                        user_id=user.id,
                        department=department,
                        phone_number=phone_number,
                        address=address,
                    )
                )
            elif role is Role.TEACHER:
                session.add(
                    Teacher(
                        name=full_name,
                        email=normalized,
                        user_id=user.id,
                        employee_id=employee_id,
                        department=department,
                        designation=designation,
                        specialization=specialization,
                    )
                )

            session.commit()
            logger.info("Created %s account %s", role.value, user.id)
            return self._reload(session, User, user.id)
        except IntegrityError as e:
            session.rollback()
            raise UserExistsError(f"Account for '{email}' conflicts with an existing one") from e
        finally:
            session.close()

    def get_user(self, user_id: str) -> User:
        """Get user by ID.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        session = self._db.get_session()
        try:
            user = session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(f"User with id '{user_id}' not found")
            return user
        finally:
            session.close()

    def get_user_by_email(self, email: str) -> User:
        """Get user by email, case-insensitively.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        session = self._db.get_session()
        try:
            stmt = select(User).where(User.email == email.strip().lower())
            user = session.execute(stmt).unique().scalar_one_or_none()
            if user is None:
                raise UserNotFoundError(f"User with email '{email}' not found")
            return user
        finally:
            session.close()

    def revoke_token(self, jti: str, user_id: str) -> None:
        """Mark an access token as logged out. Revoking twice is a no-op."""
        with self._db.session_scope() as session:
            if session.get(RevokedToken, jti) is None:
                session.add(RevokedToken(jti=jti, user_id=user_id))

    def is_token_revoked(self, jti: str) -> bool:
        session = self._db.get_session()
        try:
            return session.get(RevokedToken, jti) is not None
        finally:
            session.close()

    # --- Student Operations ---

    def create_student(
        self,
        roll_no: str,
        name: str,
        email: str,
        semester: int,
        department: str | None = None,
        phone_number: str | None = None,
        address: str | None = None,
        active: bool = True,
    ) -> Student:
        """Create a student profile without a login account.

        Raises:
            StudentExistsError: If the roll number is taken
        """
        session = self._db.get_session()
        try:
            student = Student(
                roll_no=roll_no,
                name=name,
                email=email,
                semester=semester,
                department=department,
                phone_number=phone_number,
                address=address,
                active=active,
            )
            session.add(student)
            session.commit()
            session.refresh(student)
            return student
        except IntegrityError as e:
            session.rollback()
            raise StudentExistsError(f"Student with roll number '{roll_no}' already exists") from e
        finally:
            session.close()

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._require_student(session, student_id)
        finally:
            session.close()

    def get_student_by_user(self, user_id: str) -> Student:
        """Get the student profile linked to a user account.

        Raises:
            StudentNotFoundError: If the user has no student profile
        """
        session = self._db.get_session()
        try:
            student = session.scalars(select(Student).where(Student.user_id == user_id)).first()
            if student is None:
                raise StudentNotFoundError(f"No student profile for user '{user_id}'")
            return student
        finally:
            session.close()

    def list_students(
        self,
        search: str | None = None,
        semester: int | None = None,
        department: str | None = None,
        page: int = 0,
        size: int = 10,
    ) -> Page[Student]:
        """List students with optional filters.

        Args:
            search: Substring of name, roll number or email
            semester: Exact semester
            department: Department, case-insensitive
            page: Zero-based page number
            size: Page size

        Returns:
            Page of students ordered by roll number
        """
        session = self._db.get_session()
        try:
            stmt = select(Student)
            if search:
                term = _like(search)
                stmt = stmt.where(
                    or_(
                        Student.name.ilike(term),
                        Student.roll_no.ilike(term),
                        Student.email.ilike(term),
                    )
                )
            if semester is not None:
                stmt = stmt.where(Student.semester == semester)
            if department:
                stmt = stmt.where(func.lower(Student.department) == department.strip().lower())
            stmt = stmt.order_by(Student.roll_no)
            return self._paginate(session, stmt, page, size)
        finally:
            session.close()

    def update_student(self, student_id: str, **fields: Any) -> Student:
        """Update student fields. Only fields passed with a non-None value change.

        Args:
            student_id: The student's unique ID
            **fields: Any of roll_no, name, email, semester, department,
                phone_number, address, active

        Returns:
            The updated Student

        Raises:
            StudentNotFoundError: If student doesn't exist
            StudentExistsError: If the new roll number is taken
        """
        allowed = {
            "roll_no",
            "name",
            "email",
            "semester",
            "department",
            "phone_number",
            "address",
            "active",
        }
        unknown = set(fields) - allowed
        if unknown:
            raise ValidationError(f"Unknown student fields: {', '.join(sorted(unknown))}")

        session = self._db.get_session()
        try:
            student = self._require_student(session, student_id)
            for name, value in fields.items():
                if value is not None:
                    setattr(student, name, value)
            session.commit()
            session.refresh(student)
            return student
        except IntegrityError as e:
            session.rollback()
            raise StudentExistsError(
                f"Student with roll number '{fields.get('roll_no')}' already exists"
            ) from e
        finally:
            session.close()

    def delete_student(self, student_id: str) -> None:
        """Delete a student together with their marks, queries and requests.

        The linked login account, if any, is deactivated in the same transaction.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        with self._db.session_scope() as session:
            student = self._require_student(session, student_id)
            if student.user_id is not None:
                user = session.get(User, student.user_id)
                if user is not None:
                    user.active = False
            session.delete(student)
        logger.info("Deleted student %s", student_id)

    # --- Teacher Operations ---

    def create_teacher(
        self,
        name: str,
        email: str,
        employee_id: str | None = None,
        department: str | None = None,
        designation: str | None = None,
        specialization: str | None = None,
    ) -> Teacher:
        """Create a teacher profile without a login account."""
        with self._db.session_scope() as session:
            teacher = Teacher(
                name=name,
                email=email,
                employee_id=employee_id,
                department=department,
                designation=designation,
                specialization=specialization,
            )
            session.add(teacher)
            session.flush()
            session.refresh(teacher)
        return teacher

    def get_teacher(self, teacher_id: str) -> Teacher:
        """Get teacher by ID.

        Raises:
            TeacherNotFoundError: If teacher doesn't exist
        """
        session = self._db.get_session()
        try:
            teacher = session.get(Teacher, teacher_id)
            if teacher is None:
                raise TeacherNotFoundError(f"Teacher with id '{teacher_id}' not found")
            return teacher
        finally:
            session.close()

    def get_teacher_by_user(self, user_id: str) -> Teacher:
        """Get the teacher profile linked to a user account."""
        session = self._db.get_session()
        try:
            teacher = session.scalars(select(Teacher).where(Teacher.user_id == user_id)).first()
            if teacher is None:
                raise TeacherNotFoundError(f"No teacher profile for user '{user_id}'")
            return teacher
        finally:
            session.close()

    # --- Subject Operations ---

    def create_subject(
        self,
        code: str,
        name: str,
        semester: int,
        credits: int,
        department: str | None = None,
        teacher_id: str | None = None,
    ) -> Subject:
        """Create a subject.

        Raises:
            SubjectExistsError: If the code is taken
            TeacherNotFoundError: If teacher_id is given but unknown
            ValidationError: If credits or semester are not positive
        """
        if credits <= 0 or semester <= 0:
            raise ValidationError("Subject credits and semester must be positive")

        session = self._db.get_session()
        try:
            if teacher_id is not None and session.get(Teacher, teacher_id) is None:
                raise TeacherNotFoundError(f"Teacher with id '{teacher_id}' not found")
            subject = Subject(
                code=code,
                name=name,
                semester=semester,
                credits=credits,
                department=department,
                teacher_id=teacher_id,
            )
            session.add(subject)
            session.commit()
            return self._reload(session, Subject, subject.id)
        except IntegrityError as e:
            session.rollback()
            raise SubjectExistsError(f"Subject with code '{code}' already exists") from e
        finally:
            session.close()

    def get_subject(self, subject_id: str) -> Subject:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._require_subject(session, subject_id)
        finally:
            session.close()

    def list_subjects(
        self, semester: int | None = None, teacher_id: str | None = None
    ) -> list[Subject]:
        """List active subjects ordered by semester then code."""
        session = self._db.get_session()
        try:
            stmt = select(Subject).where(Subject.active.is_(True))
            if semester is not None:
                stmt = stmt.where(Subject.semester == semester)
            if teacher_id is not None:
                stmt = stmt.where(Subject.teacher_id == teacher_id)
            stmt = stmt.order_by(Subject.semester, Subject.code)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def list_subjects_for_teacher(self, teacher_id: str) -> list[Subject]:
        return self.list_subjects(teacher_id=teacher_id)

    @staticmethod
    def _enrolled_in(subject: Subject) -> ColumnElement[bool]:
        """Students taking ``subject``: its semester, and its department when set."""
        condition = Student.semester == subject.semester
        if subject.department:
            condition = and_(
                condition,
                func.lower(Student.department) == subject.department.strip().lower(),
            )
        return condition

    def list_students_for_subject(self, subject_id: str) -> list[Student]:
        """Active students in the subject's semester (and department, when set).

        Raises:
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            subject = self._require_subject(session, subject_id)
            stmt = select(Student).where(
                Student.active.is_(True), self._enrolled_in(subject)
            )
            return list(session.execute(stmt.order_by(Student.roll_no)).scalars().all())
        finally:
            session.close()

    # --- Mark Operations ---

    @staticmethod
    def _apply_components(mark: Mark, internal1: float, internal2: float, external: float) -> None:
        obtained, maximum = total_marks(internal1, internal2, external)
        mark.internal1 = internal1
        mark.internal2 = internal2
        mark.external = external
        mark.marks = obtained
        mark.max_marks = maximum
        mark.grade = grade_for_components(internal1, internal2, external)

    def _upsert_mark(
        self,
        session: Session,
        student_id: str,
        subject_id: str,
        internal1: float,
        internal2: float,
        external: float,
        exam_type: str,
        academic_year: str | None,
        uploaded_by: str | None,
    ) -> Mark:
        stmt = select(Mark).where(
            Mark.student_id == student_id,
            Mark.subject_id == subject_id,
            Mark.exam_type == exam_type,
        )
        mark = session.execute(stmt).scalar_one_or_none()
        if mark is None:
            obtained, maximum = total_marks(internal1, internal2, external)
            mark = Mark(
                student_id=student_id,
                subject_id=subject_id,
                internal1=internal1,
                internal2=internal2,
                external=external,
                marks=obtained,
                max_marks=maximum,
                grade=grade_for_components(internal1, internal2, external),
                exam_type=exam_type,
                academic_year=academic_year,
                uploaded_by=uploaded_by,
            )
            session.add(mark)
        else:
            self._apply_components(mark, internal1, internal2, external)
            if academic_year is not None:
                mark.academic_year = academic_year
            if uploaded_by is not None:
                mark.uploaded_by = uploaded_by
        return mark

    def upsert_mark(
        self,
        student_id: str,
        subject_id: str,
        internal1: float,
        internal2: float,
        external: float,
        exam_type: str = DEFAULT_EXAM_TYPE,
        academic_year: str | None = None,
        uploaded_by: str | None = None,
    ) -> Mark:
        """Record marks for a student in a subject.

        A second call for the same student, subject and exam type overwrites
        the earlier marks. Totals and grade are computed from the components.

        Args:
            student_id: The student's unique ID
            subject_id: The subject's unique ID
            internal1: First internal assessment (0-100)
            internal2: Second internal assessment (0-100)
            external: End-semester exam (0-100)
            exam_type: Exam type, FINAL by default
            academic_year: e.g. "2024-25"
            uploaded_by: Name of the uploader

        Returns:
            The stored Mark

        Raises:
            StudentNotFoundError: If student doesn't exist
            SubjectNotFoundError: If subject doesn't exist
        """
        session = self._db.get_session()
        try:
            self._require_student(session, student_id)
            self._require_subject(session, subject_id)
            mark = self._upsert_mark(
                session,
                student_id,
                subject_id,
                internal1,
                internal2,
                external,
                exam_type,
                academic_year,
                uploaded_by,
            )
            session.commit()
            return self._reload(session, Mark, mark.id)
        finally:
            session.close()

    def upload_marks(
        self,
        subject_id: str,
        rows: Sequence[MarkRow],
        exam_type: str = DEFAULT_EXAM_TYPE,
        academic_year: str | None = None,
        uploaded_by: str | None = None,
    ) -> list[Mark]:
        """Record marks for many students of one subject, all or nothing.

        Args:
            subject_id: The subject's unique ID
            rows: (roll_no, internal1, internal2, external) per student

        Returns:
            The stored marks in input order

        Raises:
            SubjectNotFoundError: If subject doesn't exist
            ValidationError: If a roll number is unknown or repeated
        """
        roll_numbers = [row[0] for row in rows]
        repeated = sorted({r for r in roll_numbers if roll_numbers.count(r) > 1})
        if repeated:
            raise ValidationError(f"Repeated roll numbers: {', '.join(repeated)}")

        session = self._db.get_session()
        try:
            self._require_subject(session, subject_id)
            students = {
                s.roll_no: s
                for s in session.execute(
                    select(Student).where(Student.roll_no.in_(roll_numbers))
                ).scalars()
            }
            unknown = [r for r in roll_numbers if r not in students]
            if unknown:
                raise ValidationError(f"Unknown roll numbers: {', '.join(unknown)}")

            marks = [
                self._upsert_mark(
                    session,
                    students[roll_no].id,
                    subject_id,
                    internal1,
                    internal2,
                    external,
                    exam_type,
                    academic_year,
                    uploaded_by,
                )
                for roll_no, internal1, internal2, external in rows
            ]
            session.commit()
            logger.info("Uploaded %d marks for subject %s", len(marks), subject_id)
            return [self._reload(session, Mark, m.id) for m in marks]
        finally:
            session.close()

    def get_mark(self, mark_id: str) -> Mark:
        """Get mark by ID.

        Raises:
            MarkNotFoundError: If mark doesn't exist
        """
        session = self._db.get_session()
        try:
            mark = session.get(Mark, mark_id)
            if mark is None:
                raise MarkNotFoundError(f"Mark with id '{mark_id}' not found")
            return mark
        finally:
            session.close()

    def update_mark(
        self,
        mark_id: str,
        internal1: float,
        internal2: float,
        external: float,
        exam_type: str | None = None,
        academic_year: str | None = None,
        uploaded_by: str | None = None,
    ) -> Mark:
        """Replace a mark's components and recompute its total and grade.

        Raises:
            MarkNotFoundError: If mark doesn't exist
            DuplicateError: If the new exam type is already recorded
        """
        session = self._db.get_session()
        try:
            mark = session.get(Mark, mark_id)
            if mark is None:
                raise MarkNotFoundError(f"Mark with id '{mark_id}' not found")
            self._apply_components(mark, internal1, internal2, external)
            if exam_type is not None:
                mark.exam_type = exam_type
            if academic_year is not None:
                mark.academic_year = academic_year
            if uploaded_by is not None:
                mark.uploaded_by = uploaded_by
            session.commit()
            return self._reload(session, Mark, mark.id)
        except IntegrityError as e:
            session.rollback()
            raise DuplicateError(f"Student already has {exam_type} marks for this subject") from e
        finally:
            session.close()

    def delete_mark(self, mark_id: str) -> None:
        """Delete a mark.

        Raises:
            MarkNotFoundError: If mark doesn't exist
        """
        with self._db.session_scope() as session:
            mark = session.get(Mark, mark_id)
            if mark is None:
                raise MarkNotFoundError(f"Mark with id '{mark_id}' not found")
            session.delete(mark)

    def list_marks(
        self,
        student_search: str | None = None,
        subject_code: str | None = None,
        semester: int | None = None,
        subject_id: str | None = None,
        teacher_id: str | None = None,
        page: int = 0,
        size: int = 10,
    ) -> Page[Mark]:
        """List marks with optional filters.

        Args:
            student_search: Substring of student name or roll number
            subject_code: Exact subject code, case-insensitive
            semester: Subject semester
            subject_id: Restrict to one subject
            teacher_id: Restrict to subjects assigned to this teacher
            page: Zero-based page number
            size: Page size

        Returns:
            Page of marks ordered by subject code then roll number
        """
        session = self._db.get_session()
        try:
            stmt = select(Mark).join(Mark.student).join(Mark.subject)
            if student_search:
                term = _like(student_search)
                stmt = stmt.where(or_(Student.name.ilike(term), Student.roll_no.ilike(term)))
            if subject_code:
                stmt = stmt.where(Subject.code == subject_code.strip().upper())
            if semester is not None:
                stmt = stmt.where(Subject.semester == semester)
            if subject_id is not None:
                stmt = stmt.where(Mark.subject_id == subject_id)
            if teacher_id is not None:
                stmt = stmt.where(Subject.teacher_id == teacher_id)
            stmt = stmt.order_by(Subject.code, Student.roll_no, Mark.exam_type)
            return self._paginate(session, stmt, page, size)
        finally:
            session.close()

    def get_result_records(self, student_id: str) -> list[ResultRecord]:
        """Final-exam results of a student, one record per subject.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            self._require_student(session, student_id)
            stmt = (
                select(Mark)
                .join(Mark.subject)
                .where(Mark.student_id == student_id, Mark.exam_type == DEFAULT_EXAM_TYPE)
                .order_by(Subject.semester, Subject.code)
            )
            return [m.to_result_record() for m in session.execute(stmt).scalars()]
        finally:
            session.close()

    # --- Query Operations ---

    def create_query(
        self,
        student_id: str,
        subject: str,
        faculty: str,
        title: str,
        description: str,
        priority: QueryPriority = QueryPriority.MEDIUM,
    ) -> Query:
        """Submit a query on behalf of a student.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            self._require_student(session, student_id)
            query = Query(
                student_id=student_id,
                subject=subject,
                faculty=faculty,
                title=title,
                description=description,
                priority=priority.value,
            )
            session.add(query)
            session.commit()
            return self._reload(session, Query, query.id)
        finally:
            session.close()

    def get_query(self, query_id: str) -> Query:
        """Get query by ID.

        Raises:
            QueryNotFoundError: If query doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._require_query(session, query_id)
        finally:
            session.close()

    def list_queries(
        self,
        search: str | None = None,
        status: QueryStatus | None = None,
        student_id: str | None = None,
        faculty: str | None = None,
        page: int = 0,
        size: int = 10,
    ) -> Page[Query]:
        """List queries with optional filters, most recent first.

        Args:
            search: Substring of title, description, subject or student name
            status: Exact status
            student_id: Restrict to one student
            faculty: Faculty name, case-insensitive
            page: Zero-based page number
            size: Page size
        """
        session = self._db.get_session()
        try:
            stmt = select(Query).join(Query.student)
            if search:
                term = _like(search)
                stmt = stmt.where(
                    or_(
                        Query.title.ilike(term),
                        Query.description.ilike(term),
                        Query.subject.ilike(term),
                        Student.name.ilike(term),
                    )
                )
            if status is not None:
                stmt = stmt.where(Query.status == status.value)
            if student_id is not None:
                stmt = stmt.where(Query.student_id == student_id)
            if faculty:
                stmt = stmt.where(func.lower(Query.faculty) == faculty.strip().lower())
            stmt = stmt.order_by(Query.created_at.desc(), Query.id)
            return self._paginate(session, stmt, page, size)
        finally:
            session.close()

    def update_query_status(self, query_id: str, status: QueryStatus) -> Query:
        """Change a query's status. CLOSED queries cannot be reopened.

        Raises:
            QueryNotFoundError: If query doesn't exist
            InvalidStateTransitionError: If the query is CLOSED
        """
        session = self._db.get_session()
        try:
            query = self._require_query(session, query_id)
            if query.query_status is QueryStatus.CLOSED and status is not QueryStatus.CLOSED:
                raise InvalidStateTransitionError(f"Query '{query_id}' is closed")
            query.status = status.value
            session.commit()
            return self._reload(session, Query, query.id)
        finally:
            session.close()

    def respond_to_query(self, query_id: str, response: str, responded_by: str) -> Query:
        """Answer a query and mark it RESOLVED.

        Raises:
            QueryNotFoundError: If query doesn't exist
            InvalidStateTransitionError: If the query is CLOSED
            ValidationError: If the response is blank
        """
        if not response.strip():
            raise ValidationError("Response must not be empty")

        session = self._db.get_session()
        try:
            query = self._require_query(session, query_id)
            if query.query_status is QueryStatus.CLOSED:
                raise InvalidStateTransitionError(f"Query '{query_id}' is closed")
            query.response = response.strip()
            query.responded_by = responded_by
            query.responded_at = _utcnow()
            query.status = QueryStatus.RESOLVED.value
            session.commit()
            return self._reload(session, Query, query.id)
        finally:
            session.close()

    # --- Bonafide Operations ---

    def create_bonafide_request(
        self,
        student_id: str,
        purpose: str,
        custom_purpose: str | None = None,
        additional_info: str | None = None,
    ) -> BonafideRequest:
        """Submit a bonafide certificate request.

        Raises:
            StudentNotFoundError: If student doesn't exist
            ValidationError: If purpose is blank, or "Other" without a custom purpose
        """
        purpose = purpose.strip()
        if not purpose:
            raise ValidationError("Purpose is required")
        if purpose == OTHER_PURPOSE and not (custom_purpose and custom_purpose.strip()):
            raise ValidationError("A custom purpose is required when purpose is 'Other'")

        session = self._db.get_session()
        try:
            self._require_student(session, student_id)
            request = BonafideRequest(
                student_id=student_id,
                purpose=purpose,
                custom_purpose=custom_purpose.strip() if custom_purpose else None,
                additional_info=additional_info,
            )
            session.add(request)
            session.commit()
            return self._reload(session, BonafideRequest, request.id)
        finally:
            session.close()

    def get_bonafide_request(self, request_id: str) -> BonafideRequest:
        """Get bonafide request by ID.

        Raises:
            BonafideNotFoundError: If request doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._require_bonafide(session, request_id)
        finally:
            session.close()

    def list_bonafide_requests(
        self,
        search: str | None = None,
        status: BonafideStatus | None = None,
        student_id: str | None = None,
        page: int = 0,
        size: int = 10,
    ) -> Page[BonafideRequest]:
        """List bonafide requests with optional filters, most recent first."""
        session = self._db.get_session()
        try:
            stmt = select(BonafideRequest).join(BonafideRequest.student)
            if search:
                term = _like(search)
                stmt = stmt.where(
                    or_(
                        BonafideRequest.purpose.ilike(term),
                        BonafideRequest.custom_purpose.ilike(term),
                        Student.name.ilike(term),
                        Student.roll_no.ilike(term),
                    )
                )
            if status is not None:
                stmt = stmt.where(BonafideRequest.status == status.value)
            if student_id is not None:
                stmt = stmt.where(BonafideRequest.student_id == student_id)
            stmt = stmt.order_by(BonafideRequest.created_at.desc(), BonafideRequest.id)
            return self._paginate(session, stmt, page, size)
        finally:
            session.close()

    @staticmethod
    def _next_certificate_number(session: Session, year: int) -> str:
        prefix = f"BON-{year}-"
        # Zero padding keeps the string maximum equal to the numeric one
        latest = session.execute(
            select(func.max(BonafideRequest.certificate_number)).where(
                BonafideRequest.certificate_number.like(f"{prefix}%")
            )
        ).scalar_one()
        issued = int(latest.removeprefix(prefix)) if latest else 0
        return f"{prefix}{issued + 1:05d}"

    def approve_bonafide_request(self, request_id: str, approved_by: str) -> BonafideRequest:
        """Approve a pending request and issue a certificate number.

        Raises:
            BonafideNotFoundError: If request doesn't exist
            InvalidStateTransitionError: If the request is not PENDING
        """
        session = self._db.get_session()
        try:
            request = self._require_bonafide(session, request_id)
            if request.bonafide_status is not BonafideStatus.PENDING:
                raise InvalidStateTransitionError(
                    f"Bonafide request '{request_id}' is already {request.status}"
                )
            now = _utcnow()
            request.status = BonafideStatus.APPROVED.value
            request.approved_by = approved_by
            request.approved_at = now
            request.certificate_number = self._next_certificate_number(session, now.year)
            session.commit()
            logger.info(
                "Approved bonafide request %s as %s", request_id, request.certificate_number
            )
            return self._reload(session, BonafideRequest, request.id)
        finally:
            session.close()

    def reject_bonafide_request(
        self, request_id: str, rejection_reason: str, rejected_by: str
    ) -> BonafideRequest:
        """Reject a pending request.

        Raises:
            BonafideNotFoundError: If request doesn't exist
            InvalidStateTransitionError: If the request is not PENDING
            ValidationError: If no reason is given
        """
        if not rejection_reason.strip():
            raise ValidationError("A rejection reason is required")

        session = self._db.get_session()
        try:
            request = self._require_bonafide(session, request_id)
            if request.bonafide_status is not BonafideStatus.PENDING:
                raise InvalidStateTransitionError(
                    f"Bonafide request '{request_id}' is already {request.status}"
                )
            request.status = BonafideStatus.REJECTED.value
            request.rejection_reason = rejection_reason.strip()
            request.rejected_by = rejected_by
            session.commit()
            return self._reload(session, BonafideRequest, request.id)
        finally:
            session.close()

    # --- Contact Operations ---

    def save_contact_message(
        self,
        reference_id: str,
        name: str,
        email: str,
        user_type: str,
        subject: str,
        message: str,
        priority: str,
    ) -> ContactMessage:
        """Store a contact-form submission."""
        with self._db.session_scope() as session:
            contact = ContactMessage(
                reference_id=reference_id,
                name=name,
                email=email,
                user_type=user_type,
                subject=subject,
                message=message,
                priority=priority,
            )
            session.add(contact)
            session.flush()
            session.refresh(contact)
        return contact

    # --- Dashboards ---

    def get_dashboard_stats(self) -> DashboardStats:
        """Counters for the admin dashboard."""
        session = self._db.get_session()
        try:

            def count(stmt: Select[Any]) -> int:
                return int(session.execute(stmt).scalar_one())

            def bonafides(status: BonafideStatus) -> int:
                return count(
                    select(func.count(BonafideRequest.id)).where(
                        BonafideRequest.status == status.value
                    )
                )

            return DashboardStats(
                total_students=count(select(func.count(Student.id))),
                active_students=count(
                    select(func.count(Student.id)).where(Student.active.is_(True))
                ),
                pending_queries=count(
                    select(func.count(Query.id)).where(Query.status.in_(OPEN_QUERY_STATES))
                ),
                resolved_queries=count(
                    select(func.count(Query.id)).where(
                        Query.status == QueryStatus.RESOLVED.value
                    )
                ),
                bonafide_requests=bonafides(BonafideStatus.PENDING),
                approved_bonafides=bonafides(BonafideStatus.APPROVED),
                rejected_bonafides=bonafides(BonafideStatus.REJECTED),
                results_published=count(select(func.count(Mark.id))),
            )
        finally:
            session.close()

    def get_student_dashboard(self, student_id: str) -> StudentDashboard:
        """Everything the student landing page shows.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        records = self.get_result_records(student_id)

        session = self._db.get_session()
        try:
            student = self._require_student(session, student_id)
            pending = session.execute(
                select(func.count(Query.id)).where(
                    Query.student_id == student_id, Query.status.in_(OPEN_QUERY_STATES)
                )
            ).scalar_one()
            certificates = session.execute(
                select(func.count(BonafideRequest.id)).where(
                    BonafideRequest.student_id == student_id,
                    BonafideRequest.status == BonafideStatus.APPROVED.value,
                )
            ).scalar_one()
            recent_results = session.execute(
                select(Mark)
                .where(Mark.student_id == student_id)
                .order_by(Mark.updated_at.desc(), Mark.id)
                .limit(RECENT_LIMIT)
            ).scalars()
            recent_queries = session.execute(
                select(Query)
                .where(Query.student_id == student_id)
                .order_by(Query.created_at.desc(), Query.id)
                .limit(RECENT_LIMIT)
            ).scalars()
            return StudentDashboard(
                student=student,
                summary=aggregate_results(records),
                pending_queries=pending,
                available_certificates=certificates,
                recent_results=list(recent_results),
                recent_queries=list(recent_queries),
            )
        finally:
            session.close()

    def get_teacher_dashboard(self, teacher_id: str) -> TeacherDashboard:
        """Everything the teacher landing page shows.

        Queries are matched to the teacher by faculty name.

        Raises:
            TeacherNotFoundError: If teacher doesn't exist
        """
        teacher = self.get_teacher(teacher_id)
        subjects = self.list_subjects_for_teacher(teacher_id)

        session = self._db.get_session()
        try:
            faculty_match = func.lower(Query.faculty) == teacher.name.strip().lower()
            total_students = 0
            if subjects:
                total_students = session.execute(
                    select(func.count(Student.id)).where(
                        Student.active.is_(True),
                        or_(*(self._enrolled_in(s) for s in subjects)),
                    )
                ).scalar_one()
            pending = session.execute(
                select(func.count(Query.id)).where(
                    faculty_match, Query.status.in_(OPEN_QUERY_STATES)
                )
            ).scalar_one()
            marks_uploaded = session.execute(
                select(func.count(Mark.id))
                .join(Mark.subject)
                .where(Subject.teacher_id == teacher_id)
            ).scalar_one()
            recent_queries = session.execute(
                select(Query)
                .where(faculty_match)
                .order_by(Query.created_at.desc(), Query.id)
                .limit(RECENT_LIMIT)
            ).scalars()
            return TeacherDashboard(
                teacher=teacher,
                total_students=total_students,
                pending_queries=pending,
                marks_uploaded=marks_uploaded,
                assigned_subjects=subjects,
                recent_queries=list(recent_queries),
            )
        finally:
            session.close()
