"""Tests for the portable error wrappers."""

from oss_storage.domain.errors import (
    ErrorKind,
    InitError,
    ObjectNotExistError,
    PairUnsupportedError,
    ServiceError,
    StorageError,
    format_options,
)


class TestWrappers:
    def test_storage_error_exposes_kind(self):
        cause = KeyError("k")
        err = StorageError(
            op="stat", err=ObjectNotExistError(cause), storager="Storager oss", path=["a"]
        )

        assert err.kind is ErrorKind.OBJECT_NOT_EXIST
        assert err.path == ("a",)
        assert str(err).startswith("stat on ['a']: Storager oss: object not exist")

    def test_service_error_for_unclassified_cause(self):
        err = ServiceError(
            op="create", err=PairUnsupportedError("acl"), servicer="Servicer oss", name="b"
        )

        assert err.kind is None
        assert str(err) == "create on b: Servicer oss: pair unsupported: acl"
        assert isinstance(err.__cause__, PairUnsupportedError)

    def test_init_error_message(self):
        err = InitError(
            op="new_servicer",
            type="oss",
            err=PairUnsupportedError("credential"),
            options={"credential": "hmac:ak:sk", "endpoint": "https:h"},
        )

        assert str(err) == (
            "new_servicer: oss: pair unsupported: credential"
            " [options: credential='hmac:***', endpoint='https:h']"
        )


def test_format_options_keeps_non_secret_values():
    assert format_options({"name": "b", "work_dir": "/"}) == "name='b', work_dir='/'"
