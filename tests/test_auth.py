from waiter_app.auth import PasswordAuthorization, hash_password
from waiter_app.config import ADMIN_PASSWORD_SHA256_ENV

DIGEST = hash_password("kitchen-42")


def test_correct_password_is_accepted():
    assert PasswordAuthorization("kitchen-42", DIGEST).check_admin_password()


def test_wrong_password_is_rejected():
    assert not PasswordAuthorization("kitchen-43", DIGEST).check_admin_password()
    assert not PasswordAuthorization("", DIGEST).check_admin_password()


def test_digest_comparison_ignores_case_and_whitespace():
    assert PasswordAuthorization("kitchen-42", f"  {DIGEST.upper()}\n").check_admin_password()


def test_missing_digest_denies_everything(monkeypatch):
    monkeypatch.delenv(ADMIN_PASSWORD_SHA256_ENV, raising=False)
    assert not PasswordAuthorization("kitchen-42").check_admin_password()
    assert not PasswordAuthorization("", "").check_admin_password()


def test_digest_is_read_from_environment(monkeypatch):
    monkeypatch.setenv(ADMIN_PASSWORD_SHA256_ENV, DIGEST)
    assert PasswordAuthorization("kitchen-42").check_admin_password()
    assert not PasswordAuthorization("wrong").check_admin_password()


def test_edit_mode_with_password(book):
    book.enter_edit_mode(PasswordAuthorization("kitchen-42", DIGEST))
    assert book.edit_mode
    book.exit_edit_mode()
    assert not book.edit_mode
