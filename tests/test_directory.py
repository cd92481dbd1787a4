"""Tests for the in-memory user directory operations."""

from __future__ import annotations

import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userdir import directory
from userdir.directory import (
    create_user,
    delete_user,
    filter_by_role,
    find_user_by_email,
    find_user_by_id,
    search_users,
    sort_users_by_name,
    update_user,
)
from userdir.errors import DuplicateEmail, InvalidArgument, MissingField, NotFound
from userdir.models import UserRecord

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _sample_users() -> list[UserRecord]:
    return [
        UserRecord(id=1, name="Alice Martin", email="alice@example.com", role="admin", created_at="2024-01-01T00:00:00+00:00"),
        UserRecord(id=2, name="bob Durand", email="bob@example.com", role="user", created_at="2024-01-01T00:00:00+00:00"),
        UserRecord(id=3, name="Chloé Petit", email="chloe@test.fr", role="moderator", created_at="2024-01-01T00:00:00+00:00"),
        UserRecord(id=4, name="David", email="david@example.com", role="user", created_at="2024-01-01T00:00:00+00:00"),
    ]


class CreateUserTests(unittest.TestCase):
    def test_create_user_in_empty_directory(self) -> None:
        users = create_user([], {"name": "Eve", "email": "eve@example.com"})

        self.assertEqual(len(users), 1)
        eve = users[0]
        self.assertEqual(eve.name, "Eve")
        self.assertEqual(eve.email, "eve@example.com")
        self.assertEqual(eve.role, "user")
        self.assertIsNotNone(eve.id)
        self.assertIsNotNone(eve.created_at)

    def test_create_user_normalises_fields_and_keeps_role(self) -> None:
        with mock.patch.object(directory, "_current_timestamp", return_value=FIXED_NOW):
            users = create_user([], {"name": "  Frank  ", "email": "  Frank@Example.COM ", "role": "moderator"})

        frank = users[0]
        self.assertEqual(frank.name, "Frank")
        self.assertEqual(frank.email, "frank@example.com")
        self.assertEqual(frank.role, "moderator")
        self.assertEqual(frank.created_at, FIXED_NOW.isoformat())
        self.assertEqual(frank.id, int(FIXED_NOW.timestamp() * 1000))

    def test_create_user_does_not_mutate_input(self) -> None:
        original = _sample_users()
        snapshot = list(original)

        result = create_user(original, {"name": "Eve", "email": "eve@example.com"})

        self.assertEqual(original, snapshot)
        self.assertEqual(len(result), len(original) + 1)
        self.assertEqual(result[:-1], original)
        self.assertIs(result[0], original[0])

    def test_rapid_creations_receive_distinct_ids(self) -> None:
        users: list[UserRecord] = []
        with mock.patch.object(directory, "_current_timestamp", return_value=FIXED_NOW):
            for index in range(5):
                users = create_user(users, {"name": f"User {index}", "email": f"user{index}@example.com"})

        ids = [user.id for user in users]
        self.assertEqual(len(set(ids)), 5)
        self.assertEqual(ids, sorted(ids))

    def test_create_user_rejects_duplicate_email_in_any_case(self) -> None:
        users = _sample_users()
        for email in ("alice@example.com", "ALICE@EXAMPLE.COM", "Alice@Example.com", " alice@example.com "):
            with self.subTest(email=email):
                with self.assertRaises(DuplicateEmail):
                    create_user(users, {"name": "Other Alice", "email": email})

    def test_create_user_requires_name_and_email(self) -> None:
        for candidate in ({"email": "x@example.com"}, {"name": "X"}, {"name": "", "email": "x@example.com"}):
            with self.subTest(candidate=candidate):
                with self.assertRaises(MissingField):
                    create_user([], candidate)

    def test_create_user_rejects_blank_name(self) -> None:
        for candidate in ({"name": "   ", "email": "eve@example.com"}, {"name": "Eve", "email": "  "}):
            with self.subTest(candidate=candidate):
                with self.assertRaises(MissingField):
                    create_user([], candidate)

    def test_create_user_accepts_plain_mapping_records(self) -> None:
        existing = [{"id": 1, "name": "Alice", "email": "alice@example.com", "createdAt": "2024-01-01"}]

        with self.assertRaises(DuplicateEmail):
            create_user(existing, {"name": "Alice", "email": "ALICE@example.com"})

        users = create_user(existing, {"name": "Eve", "email": "eve@example.com"})
        self.assertTrue(all(isinstance(user, UserRecord) for user in users))
        self.assertEqual(users[0].created_at, "2024-01-01")
        self.assertEqual(users[1].name, "Eve")

    def test_create_user_requires_sequence(self) -> None:
        with self.assertRaises(InvalidArgument):
            create_user(None, {"name": "Eve", "email": "eve@example.com"})  # type: ignore[arg-type]
        with self.assertRaises(InvalidArgument):
            create_user("users", {"name": "Eve", "email": "eve@example.com"})  # type: ignore[arg-type]


class LookupTests(unittest.TestCase):
    def setUp(self) -> None:
        self.users = _sample_users()

    def test_find_user_by_id(self) -> None:
        self.assertEqual(find_user_by_id(self.users, 2).name, "bob Durand")
        self.assertIsNone(find_user_by_id(self.users, 99))
        self.assertIsNone(find_user_by_id(self.users, "2"))

    def test_find_user_by_id_requires_sequence(self) -> None:
        with self.assertRaises(InvalidArgument):
            find_user_by_id({"id": 1}, 1)  # type: ignore[arg-type]

    def test_find_user_by_id_requires_exact_type(self) -> None:
        self.assertIsNone(find_user_by_id(self.users, 1.0))
        self.assertIsNone(find_user_by_id(self.users, True))
        self.assertEqual(find_user_by_id(self.users, 1).name, "Alice Martin")

    def test_lookups_accept_plain_mapping_records(self) -> None:
        plain = [{"id": 1, "name": "Alice", "email": "alice@example.com", "role": "admin"}]

        found = find_user_by_id(plain, 1)
        self.assertIsInstance(found, UserRecord)
        self.assertEqual(found.email, "alice@example.com")
        self.assertEqual([user.id for user in filter_by_role(plain, "admin")], [1])
        self.assertEqual([user.id for user in search_users(plain, "ali")], [1])
        self.assertEqual(update_user(plain, 1, {"name": "Alicia"})[0].name, "Alicia")
        self.assertEqual(delete_user(plain, 1), [])

    def test_records_of_unknown_shape_are_rejected(self) -> None:
        for users in ([1, 2], [None], ["alice@example.com"]):
            with self.subTest(users=users):
                with self.assertRaises(InvalidArgument):
                    find_user_by_id(users, 1)
                with self.assertRaises(InvalidArgument):
                    create_user(users, {"name": "Eve", "email": "eve@example.com"})

    def test_find_user_by_email_normalises_query(self) -> None:
        self.assertEqual(find_user_by_email(self.users, "  BOB@example.com ").id, 2)
        self.assertIsNone(find_user_by_email(self.users, "nobody@example.com"))

    def test_find_user_by_email_requires_string(self) -> None:
        with self.assertRaises(InvalidArgument):
            find_user_by_email(self.users, None)

    def test_filter_by_role(self) -> None:
        self.assertEqual([user.id for user in filter_by_role(self.users, "user")], [2, 4])
        self.assertEqual(filter_by_role(self.users, "superuser"), [])
        for role in ("", None, 3):
            with self.subTest(role=role):
                with self.assertRaises(InvalidArgument):
                    filter_by_role(self.users, role)

    def test_search_users_matches_name_or_email_case_insensitively(self) -> None:
        self.assertEqual([user.id for user in search_users(self.users, "ALICE")], [1])
        self.assertEqual([user.id for user in search_users(self.users, "bob")], [2])
        self.assertEqual([user.id for user in search_users(self.users, "example.com")], [1, 2, 4])
        self.assertEqual([user.id for user in search_users(self.users, "test.fr")], [3])
        self.assertEqual(search_users(self.users, "zzz"), [])

    def test_blank_search_returns_copy_of_everything(self) -> None:
        for query in ("", "   "):
            with self.subTest(query=query):
                result = search_users(self.users, query)
                self.assertEqual(result, self.users)
                self.assertIsNot(result, self.users)

    def test_search_users_requires_string(self) -> None:
        with self.assertRaises(InvalidArgument):
            search_users(self.users, None)

    def test_search_and_sort_leave_input_untouched(self) -> None:
        snapshot = [user.to_dict() for user in self.users]
        search_users(self.users, "a")
        sort_users_by_name(self.users, "desc")
        self.assertEqual([user.to_dict() for user in self.users], snapshot)

    def test_sort_users_by_name(self) -> None:
        ascending = [user.id for user in sort_users_by_name(self.users)]
        self.assertEqual(ascending, [1, 2, 3, 4])
        descending = [user.id for user in sort_users_by_name(self.users, "desc")]
        self.assertEqual(descending, [4, 3, 2, 1])

    def test_sort_users_by_name_groups_accented_initials_with_base_letter(self) -> None:
        users = [
            UserRecord(id=1, name="Zoé", email="zoe@example.com"),
            UserRecord(id=2, name="Émile", email="emile@example.com"),
            UserRecord(id=3, name="Adam", email="adam@example.com"),
            UserRecord(id=4, name="eric", email="eric@example.com"),
        ]

        ascending = [user.name for user in sort_users_by_name(users)]
        self.assertEqual(ascending, ["Adam", "Émile", "eric", "Zoé"])
        descending = [user.name for user in sort_users_by_name(users, "desc")]
        self.assertEqual(descending, ["Zoé", "eric", "Émile", "Adam"])

    def test_sort_users_by_name_rejects_unknown_order(self) -> None:
        with self.assertRaises(InvalidArgument):
            sort_users_by_name(self.users, "up")


class MutationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.users = _sample_users()

    def test_update_user_drops_id_and_created_at(self) -> None:
        result = update_user(
            self.users,
            1,
            {"id": 999, "name": "Alice", "created_at": "1999-01-01", "createdAt": "1999-01-01"},
        )

        renamed = find_user_by_id(result, 1)
        self.assertIsNotNone(renamed)
        self.assertEqual(renamed.name, "Alice")
        self.assertEqual(renamed.created_at, "2024-01-01T00:00:00+00:00")
        self.assertIsNone(find_user_by_id(result, 999))

    def test_update_user_only_touches_matching_record(self) -> None:
        result = update_user(self.users, 2, {"role": "moderator", "phone": "0612345678"})

        self.assertEqual(result[1].role, "moderator")
        self.assertEqual(result[1].get("phone"), "0612345678")
        self.assertEqual(result[1].to_dict()["phone"], "0612345678")
        self.assertIs(result[0], self.users[0])
        self.assertIs(result[2], self.users[2])
        self.assertEqual(self.users[1].role, "user")

    def test_update_user_does_not_recheck_email_uniqueness(self) -> None:
        result = update_user(self.users, 2, {"email": "alice@example.com"})
        self.assertEqual(result[1].email, "alice@example.com")

    def test_update_unknown_user_raises(self) -> None:
        with self.assertRaises(NotFound) as context:
            update_user(self.users, 42, {"name": "Ghost"})
        self.assertEqual(context.exception.user_id, 42)

    def test_delete_user_preserves_order(self) -> None:
        result = delete_user(self.users, 2)
        self.assertEqual([user.id for user in result], [1, 3, 4])
        self.assertEqual(len(self.users), 4)

    def test_delete_unknown_user_raises(self) -> None:
        with self.assertRaises(NotFound):
            delete_user(self.users, 42)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
