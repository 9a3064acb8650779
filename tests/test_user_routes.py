"""
LinguaHub Backend — User Endpoint Tests
=========================================

What:  Registration, profile read/update and password update over HTTP.
How:   Real SQLite store + temp storage. Database failures are injected
       with a mocked session in TestUserServiceFailures.
"""

import io
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from starlette.datastructures import UploadFile

from app.exceptions import DatabaseError
from app.models.user import User
from app.security import hash_password, verify_password
from app.services.user_service import user_service

PROFILE_KEYS = ("name", "phone", "address", "gender", "dateOfBirth")


async def _register(client, form, files=None):
    return await client.post("/register", data=form, files=files)


async def _load_user(store, email):
    async with store.session_factory() as session:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one()


def _stored_photos(temp_storage):
    uploads = Path(temp_storage) / "uploads"
    return sorted(uploads.iterdir()) if uploads.exists() else []


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_then_profile_round_trip(self, test_client, registration_form):
        response = await _register(test_client, registration_form)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["userId"]

        profile = await test_client.get("/profile", params={"email": registration_form["email"]})
        assert profile.status_code == 200
        data = profile.json()
        for key in PROFILE_KEYS:
            assert data[key] == registration_form[key]
        assert data["email"] == registration_form["email"]
        assert data["photoURL"] is None

    @pytest.mark.asyncio
    async def test_password_mismatch_rejected(self, test_client, registration_form):
        registration_form["confirm_password"] = "something else"

        response = await _register(test_client, registration_form)

        assert response.status_code == 400
        assert response.json()["message"] == "Passwords do not match!"

    @pytest.mark.asyncio
    async def test_password_mismatch_wins_over_missing_fields(self, test_client):
        response = await _register(test_client, {"password": "a", "confirm_password": "b"})

        assert response.status_code == 400
        assert response.json()["message"] == "Passwords do not match!"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, test_client, registration_form):
        first = await _register(test_client, registration_form)
        second = await _register(test_client, {**registration_form, "name": "Someone Else"})

        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json()["message"] == "User already exists!"
        assert second.json()["success"] is False

    @pytest.mark.asyncio
    async def test_lost_registration_race_removes_photo(
        self, test_client, registration_form, sample_image_bytes, temp_storage
    ):
        await _register(test_client, registration_form)

        # The pre-check misses the existing row, so the unique index rejects the insert
        with patch.object(user_service, "_find_by_email", AsyncMock(return_value=None)):
            response = await _register(
                test_client,
                {**registration_form, "name": "Someone Else"},
                files={"photo": ("late.jpg", sample_image_bytes, "image/jpeg")},
            )

        assert response.status_code == 400
        assert response.json()["message"] == "User already exists!"
        assert _stored_photos(temp_storage) == []

    @pytest.mark.asyncio
    async def test_missing_email_rejected(self, test_client, registration_form):
        registration_form.pop("email")

        response = await _register(test_client, registration_form)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, test_client, store, registration_form):
        await _register(test_client, registration_form)

        user = await _load_user(store, registration_form["email"])
        assert user.password_hash != registration_form["password"]
        assert verify_password(registration_form["password"], user.password_hash)

    @pytest.mark.asyncio
    async def test_photo_is_stored_and_served(
        self, test_client, registration_form, sample_image_bytes, temp_storage
    ):
        response = await _register(
            test_client,
            registration_form,
            files={"photo": ("my photo.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 201

        profile = (await test_client.get("/profile", params={"email": registration_form["email"]})).json()
        photo_url = profile["photoURL"]
        assert photo_url.startswith("/uploads/")
        assert photo_url.endswith("-my-photo.jpg")

        served = await test_client.get(photo_url)
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_photo_with_bad_extension_rejected(self, test_client, registration_form):
        response = await _register(
            test_client,
            registration_form,
            files={"photo": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        missing = await test_client.get("/profile", params={"email": registration_form["email"]})
        assert missing.status_code == 404


class TestProfileRead:

    @pytest.mark.asyncio
    async def test_missing_email_is_400(self, test_client):
        response = await test_client.get("/profile")

        assert response.status_code == 400
        assert response.json()["message"] == "Email is required"

    @pytest.mark.asyncio
    async def test_unknown_email_is_404(self, test_client):
        response = await test_client.get("/profile", params={"email": "nobody@example.com"})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_password_never_returned(self, test_client, registration_form):
        await _register(test_client, registration_form)

        data = (await test_client.get("/profile", params={"email": registration_form["email"]})).json()

        assert set(data) == {"name", "email", "photoURL", "phone", "address", "gender", "dateOfBirth"}


class TestProfileUpdate:

    @pytest.mark.asyncio
    async def test_update_changes_fields(self, test_client, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"], "phone": "+55 11 90000-0000"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Profile updated"}
        data = (await test_client.get("/profile", params={"email": registration_form["email"]})).json()
        assert data["phone"] == "+55 11 90000-0000"
        assert data["name"] == registration_form["name"]

    @pytest.mark.asyncio
    async def test_same_values_report_no_changes(self, test_client, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"], "name": registration_form["name"]},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["message"] == "No changes made"

    @pytest.mark.asyncio
    async def test_unknown_email_is_404_not_no_changes(self, test_client):
        response = await test_client.put(
            "/profile/update", data={"email": "ghost@example.com", "name": "Ghost"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_email_is_400(self, test_client):
        response = await test_client.put("/profile/update", data={"name": "Nobody"})

        assert response.status_code == 400
        assert response.json()["message"] == "Email is required"

    @pytest.mark.asyncio
    async def test_identity_and_password_fields_are_ignored(self, test_client, store, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={
                "email": registration_form["email"],
                "_id": "forged-id",
                "password": "hijacked",
                "address": "Avenida Paulista 1000",
            },
        )

        assert response.status_code == 200
        user = await _load_user(store, registration_form["email"])
        assert "_id" not in user.profile
        assert "password" not in user.profile
        assert user.profile["address"] == "Avenida Paulista 1000"
        assert verify_password(registration_form["password"], user.password_hash)

    @pytest.mark.asyncio
    async def test_only_protected_fields_means_no_changes(self, test_client, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"], "_id": "forged-id"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_extra_fields_are_kept(self, test_client, store, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"], "nativeLanguage": "pt-BR"},
        )

        assert response.status_code == 200
        user = await _load_user(store, registration_form["email"])
        assert user.profile["nativeLanguage"] == "pt-BR"

    @pytest.mark.asyncio
    async def test_new_photo_replaces_photo_url(self, test_client, registration_form, sample_image_bytes):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"]},
            files={"photo": ("avatar.png", sample_image_bytes, "image/png")},
        )

        assert response.status_code == 200
        data = (await test_client.get("/profile", params={"email": registration_form["email"]})).json()
        assert data["photoURL"].startswith("/uploads/")
        assert data["photoURL"].endswith("-avatar.png")

    @pytest.mark.asyncio
    async def test_previous_photo_file_is_removed(
        self, test_client, registration_form, sample_image_bytes, temp_storage
    ):
        await _register(
            test_client,
            registration_form,
            files={"photo": ("first.jpg", sample_image_bytes, "image/jpeg")},
        )
        params = {"email": registration_form["email"]}
        old_url = (await test_client.get("/profile", params=params)).json()["photoURL"]

        response = await test_client.put(
            "/profile/update",
            data={"email": registration_form["email"]},
            files={"photo": ("second.png", sample_image_bytes, "image/png")},
        )

        assert response.status_code == 200
        new_url = (await test_client.get("/profile", params=params)).json()["photoURL"]
        assert new_url.endswith("-second.png")
        assert [p.name for p in _stored_photos(temp_storage)] == [new_url.rsplit("/", 1)[1]]
        assert (await test_client.get(old_url)).status_code == 404
        assert (await test_client.get(new_url)).status_code == 200

    @pytest.mark.asyncio
    async def test_json_body_updates_fields(self, test_client, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/profile/update",
            json={"email": registration_form["email"], "phone": "123", "gender": "female"},
        )

        assert response.status_code == 200
        data = (await test_client.get("/profile", params={"email": registration_form["email"]})).json()
        assert data["phone"] == "123"
        assert data["gender"] == "female"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ['["phone", "123"]', "{not json"])
    async def test_json_body_must_be_an_object(self, test_client, body):
        response = await test_client.put(
            "/profile/update",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestPasswordUpdate:

    @pytest.mark.asyncio
    async def test_password_is_replaced(self, test_client, store, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/update-password",
            json={"email": registration_form["email"], "newPassword": "new pass 456"},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        user = await _load_user(store, registration_form["email"])
        assert verify_password("new pass 456", user.password_hash)
        assert not verify_password(registration_form["password"], user.password_hash)

    @pytest.mark.asyncio
    async def test_missing_fields_are_400(self, test_client):
        response = await test_client.put("/update-password", json={"email": "ana@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, test_client):
        response = await test_client.put(
            "/update-password", json={"email": "ghost@example.com", "newPassword": "x"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_same_password_is_not_a_modification(self, test_client, registration_form):
        await _register(test_client, registration_form)

        response = await test_client.put(
            "/update-password",
            json={"email": registration_form["email"], "newPassword": registration_form["password"]},
        )

        assert response.status_code == 400


class TestUserServiceFailures:

    @staticmethod
    def _session_returning(mock_db_session, user):
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        mock_db_session.execute = AsyncMock(return_value=result)

    @pytest.mark.asyncio
    async def test_failed_profile_write_removes_new_photo(
        self, mock_db_session, file_service, sample_image_bytes, temp_storage
    ):
        user = User(
            email="ana@example.com",
            password_hash=hash_password("correct horse battery"),
            profile={"name": "Ana Souza", "photoURL": None},
        )
        self._session_returning(mock_db_session, user)
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("UPDATE", {}, Exception("connection reset"))
        )
        photo = UploadFile(file=io.BytesIO(sample_image_bytes), filename="avatar.jpg")

        with pytest.raises(DatabaseError):
            await user_service.update_profile(
                mock_db_session, file_service, "ana@example.com", {"name": "Ana B."}, photo=photo
            )

        assert _stored_photos(temp_storage) == []
