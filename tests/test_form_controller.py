"""
Unit tests for the create/edit form controller.
"""
import asyncio
from decimal import Decimal

import pytest

from agro_admin.controllers.form_controller import FormController, FormMode
from agro_admin.repositories.base import FileUpload
from agro_admin.repositories.resources import RESOURCES
from agro_admin.utils.form_validator import NUMBER_MESSAGE, REQUIRED_MESSAGE


class SlowRepository:
    """Repository whose saves wait for the test to release them."""

    def __init__(self, config):
        self.config = config
        self.release = asyncio.Event()
        self.saved = []

    async def create(self, draft):
        await self.release.wait()
        self.saved.append(draft)
        return draft

    async def update(self, record_id, draft):
        await self.release.wait()
        self.saved.append((record_id, draft))
        return draft


class TestOpenAndEdit:
    """Test draft initialization."""

    @pytest.mark.asyncio
    async def test_open_new_uses_defaults_and_initial(self, logged_in):
        """Test a create form starts from defaults plus overrides."""
        form = logged_in.form_controller("products")

        draft = form.open(initial={"category": 1, "unity": 1})

        assert form.mode == FormMode.CREATE
        assert draft["name_uz"] == ""
        assert draft["category"] == 1
        assert draft["image"] is None

    @pytest.mark.asyncio
    async def test_open_existing_copies_fields(self, logged_in, catalog):
        """Test an edit form copies the record field by field."""
        controller = logged_in.list_controller("categories")
        await controller.load()
        form = logged_in.form_controller("categories", controller)

        draft = form.open(controller.items[0])

        assert form.mode == FormMode.EDIT
        assert form.record_id == 1
        assert draft == {"name_uz": "Sabzavotlar", "name_ru": "Овощи", "image": "/media/veg.png"}

    @pytest.mark.asyncio
    async def test_reopen_discards_previous_draft(self, logged_in):
        """Test opening again throws away unsaved changes."""
        form = logged_in.form_controller("units")
        form.open()
        form.update_field("name_uz", "litr")

        form.open()

        assert form.draft == {"name_uz": "", "name_ru": ""}

    @pytest.mark.asyncio
    async def test_update_field_requires_open_form(self, logged_in):
        """Test editing a closed form is a programming error."""
        form = logged_in.form_controller("units")
        with pytest.raises(RuntimeError):
            form.update_field("name_uz", "kg")


class TestSubmit:
    """Test validation and saving."""

    @pytest.mark.asyncio
    async def test_missing_name_fails_without_request(self, logged_in, backend):
        """Test a draft without a bilingual name sends nothing."""
        form = logged_in.form_controller("products")
        form.open()
        form.update_field("name_uz", "Olma")
        form.update_field("price", "100")
        form.update_field("category", 2)

        result = await form.submit()

        assert result.ok is False
        assert result.field_errors == {"name_ru": REQUIRED_MESSAGE}
        assert backend.requests == []
        assert form.is_open
        assert logged_in.notifier.history == []

    @pytest.mark.asyncio
    async def test_non_numeric_price_rejected_at_submit(self, logged_in, backend):
        """Test garbage in a numeric field is caught by validation."""
        form = logged_in.form_controller("products")
        form.open(initial={"name_uz": "Olma", "name_ru": "Яблоко", "category": 2})
        form.update_field("price", "twelve")

        result = await form.submit()

        assert result.field_errors == {"price": NUMBER_MESSAGE}
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_comma_price_is_sent_with_period(self, logged_in, backend, catalog):
        """Test '12,50' reaches the server as 12.50."""
        controller = logged_in.list_controller("products")
        await controller.load()
        form = logged_in.form_controller("products", controller)
        form.open(controller.items[0])

        form.update_field("price", "12,50")
        result = await form.submit()

        assert result.ok is True
        fields, _ = backend.last_payload("PATCH")
        assert fields["price"] == "12.50"
        assert "image" not in fields

    @pytest.mark.asyncio
    async def test_create_round_trip(self, logged_in, backend, catalog):
        """Test a created record shows up on the refreshed list with the submitted values."""
        controller = logged_in.list_controller("products")
        await controller.set_search_text("Anor")
        assert controller.items == []
        form = logged_in.form_controller("products", controller)

        form.open(initial={"category": 2, "unity": 1})
        form.update_field("name_uz", "Anor")
        form.update_field("name_ru", "Гранат")
        form.update_field("price", "25000,5")
        form.update_field("image", FileUpload("anor.jpg", b"jpeg", "image/jpeg"))
        result = await form.submit()

        assert result.ok is True
        assert form.mode == FormMode.CLOSED
        assert form.draft == {}
        assert [p.name.ru for p in controller.items] == ["Гранат"]
        created = controller.items[0]
        assert created.id == result.record.id
        assert created.price == Decimal("25000.5")
        assert str(created.category) == "2"
        assert created.image == "/media/anor.jpg"
        assert logged_in.notifier.history[-1].message == "Muvaffaqiyatli yaratildi"

    @pytest.mark.asyncio
    async def test_user_password_required_only_on_create(self, logged_in, backend):
        """Test the password is mandatory for new users but optional on edit."""
        backend.seed("user", {"id": 7, "username": "vali", "email": "v@example.com", "role": "user"})
        controller = logged_in.list_controller("users")
        await controller.load()
        form = logged_in.form_controller("users", controller)

        form.open()
        form.update_field("username", "aziz")
        form.update_field("email", "aziz@example.com")
        assert (await form.submit()).field_errors == {"password": REQUIRED_MESSAGE}

        form.open(controller.items[0])
        form.update_field("role", "moderator")
        assert (await form.submit()).ok is True
        assert backend.collections["user"][0]["role"] == "moderator"

    @pytest.mark.asyncio
    async def test_server_error_keeps_form_open(self, logged_in, backend):
        """Test a failed save shows the server message and keeps the draft."""
        backend.seed("user", {"id": 7, "username": "vali", "email": "v@example.com"})
        form = logged_in.form_controller("users")
        form.open()
        form.update_field("username", "vali")
        form.update_field("email", "other@example.com")
        form.update_field("password", "s3cret")

        result = await form.submit()

        assert result.ok is False
        assert result.message == "A user with that username already exists."
        assert form.is_open
        assert form.draft["username"] == "vali"
        assert form.field_errors == {"username": "A user with that username already exists."}
        assert logged_in.notifier.history[-1].message == "A user with that username already exists."

    @pytest.mark.asyncio
    async def test_generic_failure_message(self, logged_in, backend):
        """Test a failure without server text uses the generic message."""
        backend.fail_next(500)
        form = logged_in.form_controller("units")
        form.open(initial={"name_uz": "litr", "name_ru": "литр"})

        result = await form.submit()

        assert result.ok is False
        assert logged_in.notifier.history[-1].message == "Saqlab bo'lmadi"

    @pytest.mark.asyncio
    async def test_order_status_update(self, logged_in, backend):
        """Test orders only send their status as JSON."""
        backend.seed("order", {"id": 3, "status": "pending", "order_items": []})
        controller = logged_in.list_controller("orders")
        await controller.load()
        form = logged_in.form_controller("orders", controller)

        form.open(controller.items[0])
        form.update_field("status", "shipped")
        await form.submit()

        payload, _ = backend.last_payload("PATCH")
        assert payload == {"status": "shipped"}
        assert controller.items[0].status == "shipped"

    @pytest.mark.asyncio
    async def test_late_response_after_close_is_ignored(self, notifier):
        """Test closing the form while saving drops the response quietly."""
        refreshed = []

        async def on_saved():
            refreshed.append(True)

        repository = SlowRepository(RESOURCES["units"])
        form = FormController(repository, notifier, on_saved=on_saved)
        form.open(initial={"name_uz": "kg", "name_ru": "кг"})

        pending = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        form.close()
        repository.release.set()
        result = await pending

        assert result.ok is True
        assert repository.saved == [{"name_uz": "kg", "name_ru": "кг"}]
        assert form.mode == FormMode.CLOSED
        assert refreshed == []
        assert notifier.history == []
