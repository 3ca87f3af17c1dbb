import json
import os
import sys

import pytest

from adapters.credential_store import JsonFileCredentialStore, MemoryCredentialStore
from core.domain.errors import StorageError
from core.interfaces.credential_store import SESSION_KEYS, CredentialStore


class TestMemoryCredentialStore:
    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self):
        store = MemoryCredentialStore()
        assert await store.get("authToken") is None

    @pytest.mark.asyncio
    async def test_set_get_and_remove_many(self):
        store = MemoryCredentialStore({"other": "keep"})
        await store.set("authToken", "abc")
        await store.set("userInfo", "{}")
        assert await store.get("authToken") == "abc"

        await store.remove_many(SESSION_KEYS)
        assert store.snapshot() == {"other": "keep"}

    def test_satisfies_protocol(self):
        assert isinstance(MemoryCredentialStore(), CredentialStore)


class TestJsonFileCredentialStore:
    @pytest.mark.asyncio
    async def test_missing_file_behaves_as_empty(self, tmp_path):
        store = JsonFileCredentialStore(tmp_path / "nested" / "session.json")
        assert await store.get("authToken") is None
        await store.remove_many(SESSION_KEYS)
        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_values_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "session.json"
        await JsonFileCredentialStore(path).set("authToken", "persisted")

        reopened = JsonFileCredentialStore(path)
        assert await reopened.get("authToken") == "persisted"
        assert json.loads(path.read_text(encoding="utf-8")) == {"authToken": "persisted"}

    @pytest.mark.asyncio
    async def test_remove_many_keeps_unrelated_keys(self, tmp_path):
        store = JsonFileCredentialStore(tmp_path / "session.json")
        await store.set("authToken", "a")
        await store.set("refreshToken", "r")
        await store.set("theme", "dark")

        await store.remove_many(SESSION_KEYS)

        assert await store.get("authToken") is None
        assert await store.get("refreshToken") is None
        assert await store.get("theme") == "dark"

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions")
    async def test_file_is_private(self, tmp_path):
        store = JsonFileCredentialStore(tmp_path / "session.json")
        await store.set("authToken", "a")
        assert os.stat(store.path).st_mode & 0o777 == 0o600

    @pytest.mark.asyncio
    async def test_corrupted_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            await JsonFileCredentialStore(path).get("authToken")
