"""SQLAlchemy implementations of User and Contact repositories."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import exists, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.role import Role
from domain.entities.user import Contact, User
from infrastructure.database.models import ContactEmailModel, ContactModel, UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = self._to_model(user)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> User | None:
        """Get a user by primary key."""
        model = await self._session.get(UserModel, id)
        return self._to_entity(model) if model else None

    async def exists_for_email(self, email: str) -> bool:
        """True if a user owns ``email`` directly or through its contact."""
        contact_ids = select(ContactEmailModel.contact_id).where(ContactEmailModel.email == email)
        stmt = select(
            exists().where(
                or_(
                    UserModel.email == email,
                    UserModel.contact_id.in_(contact_ids),
                )
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def mark_email_verified(self, id: UUID) -> None:
        """Set email_verified on a user."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == id)
            .values(email_verified=True)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def get_ids_by_roles(self, roles: Iterable[Role]) -> list[UUID]:
        """IDs of all users holding one of ``roles``."""
        values = [role.value for role in roles]
        stmt = select(UserModel.id).where(UserModel.role.in_(values))
        result = await self._session.execute(stmt)
        return list(result.scalars())

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            name=model.name,
            role=Role(model.role),
            contact_id=model.contact_id,
            email_verified=model.email_verified,
            is_two_factor_enabled=model.is_two_factor_enabled,
            profile_completed=model.profile_completed,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            email=entity.email,
            password_hash=entity.password_hash,
            name=entity.name,
            role=entity.role.value,
            contact_id=entity.contact_id,
            email_verified=entity.email_verified,
            is_two_factor_enabled=entity.is_two_factor_enabled,
            profile_completed=entity.profile_completed,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class SQLAlchemyContactRepository:
    """SQLAlchemy implementation of IContactRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, contact: Contact) -> Contact:
        """Create a contact and its email rows."""
        model = ContactModel(
            id=contact.id,
            phones=list(contact.phones),
            created_at=contact.created_at,
            emails=[ContactEmailModel(email=email) for email in contact.emails],
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def get_unattached_by_email(self, email: str) -> Contact | None:
        """Contact holding ``email`` that no user is linked to yet."""
        stmt = (
            select(ContactModel)
            .join(ContactEmailModel, ContactEmailModel.contact_id == ContactModel.id)
            .outerjoin(UserModel, UserModel.contact_id == ContactModel.id)
            .where(ContactEmailModel.email == email, UserModel.id.is_(None))
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: ContactModel) -> Contact:
        """Convert ORM model to domain entity."""
        return Contact(
            id=model.id,
            emails=[row.email for row in model.emails],
            phones=list(model.phones or []),
            created_at=model.created_at,
        )
