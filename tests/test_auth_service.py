import pytest

from modules.auth.schemas import RegisterRequest
from modules.auth.service import AuthService
from modules.users.models import Customer
from shared.exceptions import AppException, ErrorCode


def _request(email, username):
    return RegisterRequest(name="Late Registrant", email=email, username=username, password="travel123")


def test_register_creates_customer(db, seed):
    customer = AuthService(db).register(_request("sara@example.com", "sara"))
    assert customer.id is not None
    assert db.query(Customer).count() == 3


@pytest.mark.parametrize(
    "email, username, code",
    [
        ("alice@example.com", "alice2", ErrorCode.EMAIL_TAKEN),
        ("alice2@example.com", "alice", ErrorCode.USERNAME_TAKEN),
    ],
)
def test_register_duplicate_found_only_by_constraint(db, seed, monkeypatch, email, username, code):
    service = AuthService(db)
    check = service._taken
    calls = []

    def taken(data):
        calls.append(data)
        # Up-front check runs before the other registration has committed
        return None if len(calls) == 1 else check(data)

    monkeypatch.setattr(service, "_taken", taken)

    with pytest.raises(AppException) as excinfo:
        service.register(_request(email, username))

    assert excinfo.value.code == code
    assert excinfo.value.status_code == 409
    assert db.query(Customer).count() == 2
