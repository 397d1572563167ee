"""Unit of work behaviour of ``Database.transaction``."""

import pytest
from identity.user.user import User
from sqlalchemy import func, select


def _users(database):
    with database.transaction() as session:
        return session.scalar(select(func.count()).select_from(User))


class TestTransaction:
    def test_commits_on_success(self, database):
        with database.transaction() as session:
            session.add(User(external_id="ext_uow", email="uow@example.com", role="customer"))

        assert _users(database) == 1

    def test_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError), database.transaction() as session:
            session.add(User(external_id="ext_uow", email="uow@example.com", role="customer"))
            session.flush()
            raise RuntimeError("boom")

        assert _users(database) == 0

    def test_loaded_objects_survive_the_session(self, database):
        with database.transaction() as session:
            user = User(external_id="ext_uow", email="uow@example.com", role="customer")
            session.add(user)

        assert user.email == "uow@example.com"
        assert user.id is not None
