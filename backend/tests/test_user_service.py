"""Tests for user business rules and DTO conversion."""

import pytest

from app.exceptions import BadRequestError, ConflictError
from app.models.user import AuthProvider, User, UserRole
from app.schemas.user import UserCreate, UserFilterParams, UserUpdate
from app.services.user_service import UserService, to_dto
from conftest import STRONG_PASSWORD


def _registration(email: str = "a@x.com", **fields) -> UserCreate:
    return UserCreate(email=email, password=STRONG_PASSWORD, **fields)


class TestToDto:
    def _user(self) -> User:
        from datetime import datetime, timezone

        return User(
            id="u-1",
            email="a@x.com",
            password_hash="$2b$hash",
            two_factor_enabled=True,
            two_factor_secret="SECRET",
            role=UserRole.USER,
            provider=AuthProvider.CREDENTIALS,
            is_email_verified=False,
            is_phone_verified=False,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )

    def test_secrets_are_stripped_by_default(self):
        dto = to_dto(self._user())

        assert dto.password_hash is None
        assert dto.two_factor_secret is None
        dumped = dto.model_dump(by_alias=True)
        assert "passwordHash" not in dumped
        assert "twoFactorSecret" not in dumped
        assert dumped["twoFactorEnabled"] is True

    def test_secrets_are_kept_on_request(self):
        dto = to_dto(self._user(), include_password=True)

        assert dto.password_hash == "$2b$hash"
        assert dto.two_factor_secret == "SECRET"
        assert dto.model_dump(by_alias=True)["passwordHash"] == "$2b$hash"


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_hashes_password_and_sets_defaults(self, user_service: UserService, uow):
        dto = await user_service.create(_registration(first_name="Ada"))

        assert dto.role == UserRole.USER
        assert dto.provider == AuthProvider.CREDENTIALS
        assert dto.is_active is True
        assert dto.is_email_verified is False
        assert dto.password_hash is None

        stored = await uow.users.find_by_id(dto.id)
        assert stored.password_hash != STRONG_PASSWORD
        assert await user_service.hasher.verify(STRONG_PASSWORD, stored.password_hash)

    @pytest.mark.asyncio
    async def test_create_with_role(self, user_service: UserService):
        dto = await user_service.create(_registration(), UserRole.STAFF)

        assert dto.role == UserRole.STAFF

    @pytest.mark.asyncio
    @pytest.mark.parametrize("second_email", ["a@x.com", "A@X.COM"])
    async def test_duplicate_email_conflicts(self, user_service: UserService, second_email):
        await user_service.create(_registration())

        with pytest.raises(ConflictError) as exc_info:
            await user_service.create(UserCreate(email=second_email, password="Other1#pass", first_name="B"))

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_duplicate_phone_conflicts(self, user_service: UserService):
        await user_service.create(_registration(phone_number="+15550001"))

        with pytest.raises(ConflictError):
            await user_service.create(_registration("b@x.com", phone_number="+15550001"))


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_authenticate(self, user_service: UserService):
        await user_service.create(_registration())

        user = await user_service.authenticate("A@x.com", STRONG_PASSWORD)

        assert user is not None
        assert user.password_hash is None
        assert await user_service.authenticate("a@x.com", "Wrong1!pass") is None
        assert await user_service.authenticate("nobody@x.com", STRONG_PASSWORD) is None

    @pytest.mark.asyncio
    async def test_external_account_without_password_cannot_authenticate(self, user_service: UserService, uow):
        await uow.users.create({"email": "g@x.com", "provider": AuthProvider.GOOGLE, "provider_id": "G-1"})

        assert await user_service.authenticate("g@x.com", "") is None
        assert (await user_service.find_by_provider_id("G-1", AuthProvider.GOOGLE)).email == "g@x.com"

    @pytest.mark.asyncio
    async def test_find_by_email_include_password(self, user_service: UserService):
        await user_service.create(_registration())

        assert (await user_service.find_by_email("a@x.com")).password_hash is None
        assert (await user_service.find_by_email("a@x.com", include_password=True)).password_hash


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_only_touches_sent_fields(self, user_service: UserService):
        created = await user_service.create(_registration(first_name="Ada", last_name="Byron"))

        updated = await user_service.update(created.id, UserUpdate(lastName="Lovelace"))

        assert updated.first_name == "Ada"
        assert updated.last_name == "Lovelace"
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self, user_service: UserService):
        assert await user_service.find_by_id("missing") is None
        assert await user_service.update("missing", UserUpdate(firstName="x")) is None
        assert await user_service.delete("missing") is None
        assert await user_service.change_password("missing", "a", STRONG_PASSWORD) is None
        assert await user_service.verify_email("missing") is None

    @pytest.mark.asyncio
    async def test_update_phone_owned_by_someone_else_conflicts(self, user_service: UserService):
        await user_service.create(_registration("a@x.com", phone_number="+15550001"))
        other = await user_service.create(_registration("b@x.com"))

        with pytest.raises(ConflictError):
            await user_service.update(other.id, UserUpdate(phoneNumber="+15550001"))

    @pytest.mark.asyncio
    async def test_change_password(self, user_service: UserService):
        created = await user_service.create(_registration())

        with pytest.raises(BadRequestError):
            await user_service.change_password(created.id, "Wrong1!pass", "Brand1!new")

        await user_service.change_password(created.id, STRONG_PASSWORD, "Brand1!new")

        assert await user_service.authenticate("a@x.com", "Brand1!new") is not None
        assert await user_service.authenticate("a@x.com", STRONG_PASSWORD) is None

    @pytest.mark.asyncio
    async def test_two_factor_requires_secret_to_enable(self, user_service: UserService):
        created = await user_service.create(_registration())

        with pytest.raises(BadRequestError):
            await user_service.set_two_factor_enabled(created.id, True)

        enabled = await user_service.set_two_factor_enabled(created.id, True, "SECRET")
        assert enabled.two_factor_enabled is True
        assert enabled.two_factor_secret is None  # never exposed in the DTO

    @pytest.mark.asyncio
    async def test_role_status_and_verification(self, user_service: UserService):
        created = await user_service.create(_registration())

        await user_service.verify_email(created.id)
        await user_service.verify_phone(created.id)
        await user_service.update_role(created.id, UserRole.ADMIN)
        user = await user_service.set_active_status(created.id, False)

        assert user.is_email_verified and user.is_phone_verified
        assert user.role == UserRole.ADMIN
        assert user.is_active is False

    @pytest.mark.asyncio
    async def test_delete_returns_removed_user(self, user_service: UserService):
        created = await user_service.create(_registration())

        deleted = await user_service.delete(created.id)

        assert deleted.id == created.id
        assert await user_service.find_by_id(created.id) is None


class TestListing:
    @pytest.mark.asyncio
    async def test_find_all_returns_page_of_dtos(self, user_service: UserService):
        for i in range(3):
            await user_service.create(_registration(f"u{i}@x.com", first_name=f"Name{i}"))

        page = await user_service.find_all(UserFilterParams(search="name"), page=1, limit=2)

        assert page.total == 3
        assert page.total_pages == 2
        assert len(page.items) == 2
        assert all(item.password_hash is None for item in page.items)

    @pytest.mark.asyncio
    async def test_count_by_role(self, user_service: UserService):
        await user_service.create(_registration("a@x.com"))
        await user_service.create(_registration("b@x.com"), UserRole.ADMIN)

        counts = {row.role: row.count for row in await user_service.count_by_role()}

        assert counts == {UserRole.USER: 1, UserRole.ADMIN: 1}
