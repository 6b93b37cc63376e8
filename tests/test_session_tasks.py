from datetime import datetime, timedelta

from family_auth.models.refresh_token import RefreshToken
from family_auth.tasks.session_tasks import purge_expired


def test_purge_expired_removes_only_dead_rows(db_session, refresh_token_repository, make_user):
    user = make_user()
    refresh_token_repository.create(user.id, "a" * 64, datetime.utcnow() - timedelta(hours=1))
    refresh_token_repository.create(user.id, "b" * 64, datetime.utcnow() + timedelta(hours=1))

    assert purge_expired(db_session) == 1
    assert [r.token_hash for r in db_session.query(RefreshToken).all()] == ["b" * 64]
    assert purge_expired(db_session) == 0
