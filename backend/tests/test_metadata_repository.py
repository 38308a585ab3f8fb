import uuid

import pytest

from files_manager.exceptions import NotFound, InvalidParent
from files_manager.models.file_record import FileRecord, ROOT_PARENT_ID
from files_manager.services.metadata_repository import PAGE_SIZE


def folder(user_id, name="docs", parent_id=ROOT_PARENT_ID):
    return FileRecord(user_id=user_id, name=name, type="folder", parent_id=parent_id)


class TestGet:
    @pytest.mark.asyncio
    async def test_create_assigns_id(self, repo, user_id):
        record_id = await repo.create(folder(user_id))

        assert isinstance(record_id, uuid.UUID)
        fetched = await repo.get(record_id)
        assert fetched.name == "docs"
        assert fetched.is_public is False
        assert fetched.storage_path is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [str(uuid.uuid4()), "not-a-uuid", ""])
    async def test_get_unknown_or_malformed_id_is_not_found(self, repo, bad_id):
        with pytest.raises(NotFound):
            await repo.get(bad_id)

    @pytest.mark.asyncio
    async def test_get_owned_hides_other_users_records(self, repo, user_id, other_user_id):
        record_id = await repo.create(folder(user_id))

        assert (await repo.get_owned(str(record_id), user_id)).id == record_id
        with pytest.raises(NotFound):
            await repo.get_owned(str(record_id), other_user_id)


class TestListChildren:
    @pytest.mark.asyncio
    async def test_pages_of_twenty(self, repo, user_id):
        for i in range(25):
            await repo.create(folder(user_id, name=f"f{i}"))

        page0 = await repo.list_children(user_id, ROOT_PARENT_ID, 0)
        page1 = await repo.list_children(user_id, ROOT_PARENT_ID, 1)
        page2 = await repo.list_children(user_id, ROOT_PARENT_ID, 2)

        assert len(page0) == PAGE_SIZE == 20
        assert len(page1) == 5
        assert page2 == []
        assert not {r.id for r in page0} & {r.id for r in page1}

    @pytest.mark.asyncio
    async def test_insertion_order(self, repo, user_id):
        names = [f"f{i:02d}" for i in range(25)]
        for name in names:
            await repo.create(folder(user_id, name=name))

        page0 = await repo.list_children(user_id, ROOT_PARENT_ID, 0)
        page1 = await repo.list_children(user_id, ROOT_PARENT_ID, 1)

        assert [r.name for r in page0 + page1] == names

    @pytest.mark.asyncio
    async def test_parent_id_spelling_is_normalised(self, repo, user_id):
        parent_id = await repo.create(folder(user_id))
        await repo.create(folder(user_id, name="child", parent_id=str(parent_id)))

        for spelling in (str(parent_id).upper(), parent_id.hex, "{" + str(parent_id) + "}"):
            children = await repo.list_children(user_id, spelling, 0)
            assert [c.name for c in children] == ["child"]

    @pytest.mark.asyncio
    async def test_scoped_to_owner_and_parent(self, repo, user_id, other_user_id):
        parent_id = await repo.create(folder(user_id))
        await repo.create(folder(user_id, name="child", parent_id=str(parent_id)))
        await repo.create(folder(other_user_id, name="intruder", parent_id=str(parent_id)))

        children = await repo.list_children(user_id, str(parent_id), 0)
        assert [c.name for c in children] == ["child"]
        assert await repo.list_children(other_user_id, ROOT_PARENT_ID, 0) == []


class TestValidateParent:
    @pytest.mark.asyncio
    async def test_root_is_always_valid(self, repo):
        assert await repo.validate_parent(ROOT_PARENT_ID) == ROOT_PARENT_ID
        assert await repo.validate_parent(0) == ROOT_PARENT_ID

    @pytest.mark.asyncio
    async def test_returns_canonical_folder_id(self, repo, user_id):
        parent_id = await repo.create(folder(user_id))

        assert await repo.validate_parent(str(parent_id).upper()) == str(parent_id)

    @pytest.mark.asyncio
    async def test_missing_parent(self, repo):
        with pytest.raises(InvalidParent) as exc:
            await repo.validate_parent(str(uuid.uuid4()))
        assert exc.value.message == "Parent not found"

    @pytest.mark.asyncio
    async def test_parent_must_be_folder(self, repo, user_id):
        file_id = await repo.create(
            FileRecord(user_id=user_id, name="a.txt", type="file", storage_path="/tmp/x")
        )
        with pytest.raises(InvalidParent) as exc:
            await repo.validate_parent(str(file_id))
        assert exc.value.message == "Parent is not a folder"


class TestSetPublic:
    @pytest.mark.asyncio
    async def test_updates_flag(self, repo, session_factory, user_id):
        record_id = await repo.create(folder(user_id))

        await repo.set_public(record_id, True)

        async with session_factory() as fresh:
            assert (await fresh.get(FileRecord, record_id)).is_public is True

    @pytest.mark.asyncio
    async def test_count_files(self, repo, user_id):
        await repo.create(folder(user_id))
        await repo.create(folder(user_id))
        assert await repo.count_files() == 2
