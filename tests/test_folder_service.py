import pytest
from unittest.mock import AsyncMock, patch

from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.models import Activity, File, Folder


async def _assert_path_invariant(owner_id):
    folders = {f.id: f for f in await Folder.find({"owner_id": owner_id}).to_list()}
    for folder in folders.values():
        if folder.parent_id is None:
            assert folder.path == []
        else:
            parent = folders[folder.parent_id]
            assert folder.path == [*parent.path, parent.id]
        assert folder.id not in folder.path


class TestCreate:
    async def test_root_and_child_paths(self, folders, user_id):
        root = await folders.create_folder(user_id, "Documents")
        child = await folders.create_folder(user_id, "Invoices", root.id)
        grandchild = await folders.create_folder(user_id, "2024", child.id)

        assert root.path == [] and root.parent_id is None
        assert child.path == [root.id]
        assert grandchild.path == [root.id, child.id]
        await _assert_path_invariant(user_id)

    async def test_name_is_trimmed_and_required(self, folders, user_id):
        folder = await folders.create_folder(user_id, "  Photos ")
        assert folder.name == "Photos"

        with pytest.raises(InvalidArgumentError):
            await folders.create_folder(user_id, "   ")

    async def test_sibling_names_are_unique(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B")
        await folders.create_folder(user_id, "X", a.id)

        with pytest.raises(ConflictError):
            await folders.create_folder(user_id, "X", a.id)
        # same name under another parent is fine
        await folders.create_folder(user_id, "X", b.id)
        await folders.create_folder(user_id, "X")

    async def test_index_rejects_sibling_that_slips_past_lookup(self, folders, user_id):
        await folders.create_folder(user_id, "Inbox")
        with patch.object(folders.crud, "get_sibling", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError):
                await folders.create_folder(user_id, "Inbox")
        assert await Folder.find({"owner_id": user_id, "name": "Inbox"}).count() == 1

    async def test_same_name_for_different_owners(self, folders, user_id, other_user):
        await folders.create_folder(user_id, "Shared")
        await folders.create_folder(str(other_user.id), "Shared")

    async def test_missing_parent_or_owner(self, folders, user_id):
        with pytest.raises(NotFoundError):
            await folders.create_folder(user_id, "Orphan", "665f1c2b9a1e4b7d2c3f4a51")
        with pytest.raises(NotFoundError):
            await folders.create_folder(user_id, "Orphan", "not-an-id")
        with pytest.raises(NotFoundError):
            await folders.create_folder("665f1c2b9a1e4b7d2c3f4a51", "Nobody")

    async def test_parent_of_another_owner_is_not_found(self, folders, user_id, other_user):
        theirs = await folders.create_folder(str(other_user.id), "Private")
        with pytest.raises(NotFoundError):
            await folders.create_folder(user_id, "Sneaky", theirs.id)


class TestRead:
    async def test_get_folder_resolves_owner_parent_and_path(self, folders, user_id):
        root = await folders.create_folder(user_id, "Root")
        mid = await folders.create_folder(user_id, "Mid", root.id)
        leaf = await folders.create_folder(user_id, "Leaf", mid.id)

        detail = await folders.get_folder(user_id, leaf.id)
        assert detail.owner.username == "alice"
        assert detail.parent.id == mid.id
        assert [p.name for p in detail.path] == ["Root", "Mid"]

        root_detail = await folders.get_folder(user_id, root.id)
        assert root_detail.parent is None
        assert root_detail.path == []

    async def test_get_folder_of_other_owner(self, folders, user_id, other_user):
        theirs = await folders.create_folder(str(other_user.id), "Private")
        with pytest.raises(NotFoundError):
            await folders.get_folder(user_id, theirs.id)

    async def test_list_roots_newest_first(self, folders, user_id):
        first = await folders.create_folder(user_id, "First")
        second = await folders.create_folder(user_id, "Second")
        await folders.create_folder(user_id, "Nested", first.id)

        roots = await folders.list_root_folders(user_id)
        assert [r.id for r in roots] == [second.id, first.id]

    async def test_get_path(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)

        path = await folders.get_folder_path(user_id, b.id)
        assert path.name == "B"
        assert [(p.id, p.name) for p in path.path] == [(a.id, "A")]

    async def test_list_children(self, folders, user_id):
        parent = await folders.create_folder(user_id, "Parent")
        c1 = await folders.create_folder(user_id, "C1", parent.id)
        c2 = await folders.create_folder(user_id, "C2", parent.id)

        children = await folders.list_children(user_id, parent.id)
        assert [c.id for c in children] == [c2.id, c1.id]
        assert await folders.list_children(user_id, c1.id) == []

        with pytest.raises(NotFoundError):
            await folders.list_children(user_id, "665f1c2b9a1e4b7d2c3f4a51")


class TestTree:
    async def test_build_tree_in_creation_order(self, folders, user_id):
        r1 = await folders.create_folder(user_id, "R1")
        await folders.create_folder(user_id, "R2")
        c1 = await folders.create_folder(user_id, "C1", r1.id)
        c2 = await folders.create_folder(user_id, "C2", r1.id)

        tree = await folders.build_tree(user_id, r1.id)
        assert tree.model_dump() == {
            "id": r1.id,
            "name": "R1",
            "children": [
                {"id": c1.id, "name": "C1", "children": []},
                {"id": c2.id, "name": "C2", "children": []},
            ],
        }
        assert (await folders.build_tree(user_id, r1.id)) == tree

    async def test_build_tree_handles_deep_nesting(self, folders, user_id):
        parent = await folders.create_folder(user_id, "level-0")
        root_id = parent.id
        for depth in range(1, 60):
            parent = await folders.create_folder(user_id, f"level-{depth}", parent.id)

        node = await folders.build_tree(user_id, root_id)
        depth = 0
        while node.children:
            node = node.children[0]
            depth += 1
        assert depth == 59
        assert node.name == "level-59"

    async def test_build_forest(self, folders, user_id):
        r1 = await folders.create_folder(user_id, "R1")
        r2 = await folders.create_folder(user_id, "R2")
        await folders.create_folder(user_id, "C1", r2.id)

        forest = await folders.build_forest(user_id)
        assert [t.id for t in forest] == [r1.id, r2.id]
        assert [c.name for c in forest[1].children] == ["C1"]

    async def test_build_tree_missing_root(self, folders, user_id):
        with pytest.raises(NotFoundError):
            await folders.build_tree(user_id, "665f1c2b9a1e4b7d2c3f4a51")


class TestRename:
    async def test_rename_keeps_descendant_paths(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)

        renamed = await folders.rename_folder(user_id, a.id, "Archive")
        assert renamed.name == "Archive"
        assert (await folders.get_folder_path(user_id, b.id)).path[0].name == "Archive"
        await _assert_path_invariant(user_id)

        activity = await Activity.find_one({"action": "rename"})
        assert str(activity.folder_id) == a.id

    async def test_rename_to_same_name_is_noop(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        assert (await folders.rename_folder(user_id, a.id, "A")).name == "A"
        assert await Activity.find({"action": "rename"}).count() == 0

    async def test_rename_errors(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        await folders.create_folder(user_id, "B")

        with pytest.raises(ConflictError):
            await folders.rename_folder(user_id, a.id, "B")
        with pytest.raises(InvalidArgumentError):
            await folders.rename_folder(user_id, a.id, "")
        with pytest.raises(NotFoundError):
            await folders.rename_folder(user_id, "665f1c2b9a1e4b7d2c3f4a51", "C")


class TestMove:
    async def test_move_cascades_to_descendants(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        c = await folders.create_folder(user_id, "C", b.id)
        d = await folders.create_folder(user_id, "D", c.id)
        target = await folders.create_folder(user_id, "Target")

        moved = await folders.move_folder(user_id, b.id, target.id)
        assert moved.parent_id == target.id
        assert moved.path == [target.id]

        c_path = await folders.get_folder_path(user_id, c.id)
        d_path = await folders.get_folder_path(user_id, d.id)
        assert [p.id for p in c_path.path] == [target.id, b.id]
        assert [p.id for p in d_path.path] == [target.id, b.id, c.id]
        await _assert_path_invariant(user_id)

        assert await Activity.find({"action": "move"}).count() == 1

    async def test_move_to_root(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        c = await folders.create_folder(user_id, "C", b.id)

        moved = await folders.move_folder(user_id, b.id, None)
        assert moved.parent_id is None and moved.path == []
        assert [p.id for p in (await folders.get_folder_path(user_id, c.id)).path] == [b.id]
        assert {r.id for r in await folders.list_root_folders(user_id)} == {a.id, b.id}
        await _assert_path_invariant(user_id)

    async def test_move_into_self_or_descendant_fails(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        c = await folders.create_folder(user_id, "C", b.id)

        for destination in (a, b, c):
            with pytest.raises(InvalidArgumentError):
                await folders.move_folder(user_id, a.id, destination.id)
        await _assert_path_invariant(user_id)

    async def test_move_to_current_parent_is_noop(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)

        moved = await folders.move_folder(user_id, b.id, a.id)
        assert moved.path == [a.id]
        assert await Activity.find({"action": "move"}).count() == 0

    async def test_move_conflict_and_missing(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B")
        x = await folders.create_folder(user_id, "X", a.id)
        await folders.create_folder(user_id, "X", b.id)

        with pytest.raises(ConflictError):
            await folders.move_folder(user_id, x.id, b.id)
        with pytest.raises(NotFoundError):
            await folders.move_folder(user_id, x.id, "665f1c2b9a1e4b7d2c3f4a51")
        with pytest.raises(NotFoundError):
            await folders.move_folder(user_id, "665f1c2b9a1e4b7d2c3f4a51", b.id)


class TestDelete:
    async def test_delete_removes_whole_subtree(self, folders, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        c = await folders.create_folder(user_id, "C", b.id)
        keep = await folders.create_folder(user_id, "Keep")

        result = await folders.delete_folder(user_id, a.id)
        assert result.deleted_folders == 3

        ids = [a.id, b.id, c.id]
        remaining = await Folder.find({"owner_id": user_id}).to_list()
        assert [str(f.id) for f in remaining] == [keep.id]
        for folder in remaining:
            assert str(folder.parent_id) not in ids

    async def test_delete_orphans_contained_files(self, folders, upload, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        uploaded = await upload("deep.txt", folder_id=b.id)

        result = await folders.delete_folder(user_id, a.id)
        assert result.orphaned_files == 1

        file = await File.get(uploaded.id)
        assert file is not None and file.folder_id is None

    async def test_delete_missing_or_foreign(self, folders, user_id, other_user):
        theirs = await folders.create_folder(str(other_user.id), "Theirs")
        with pytest.raises(NotFoundError):
            await folders.delete_folder(user_id, theirs.id)
        with pytest.raises(NotFoundError):
            await folders.delete_folder(user_id, "665f1c2b9a1e4b7d2c3f4a51")

    async def test_delete_numbers_colliding_unfiled_names(self, folders, upload, user_id):
        a = await folders.create_folder(user_id, "A")
        b = await folders.create_folder(user_id, "B", a.id)
        loose = await upload("readme.txt")
        in_a = await upload("readme.txt", folder_id=a.id)
        in_b = await upload("readme.txt", folder_id=b.id)
        unique = await upload("notes.txt", folder_id=b.id)

        result = await folders.delete_folder(user_id, a.id)
        assert result.orphaned_files == 3
        assert result.renamed_files == 2

        names = {str(f.id): f.name for f in await File.find({"owner_id": user_id, "folder_id": None}).to_list()}
        assert names == {
            loose.id: "readme.txt",
            in_a.id: "readme (1).txt",
            in_b.id: "readme (2).txt",
            unique.id: "notes.txt",
        }
        assert await Activity.find({"action": "rename"}).count() == 2

    async def test_delete_skips_numbered_names_already_taken(self, folders, upload, user_id):
        a = await folders.create_folder(user_id, "A")
        await upload("photo.png")
        await upload("photo (1).png")
        moved = await upload("photo.png", folder_id=a.id)

        await folders.delete_folder(user_id, a.id)
        assert (await File.get(moved.id)).name == "photo (2).png"
