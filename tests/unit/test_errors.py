"""Tests for the error hierarchy."""

import pytest

from service_batch.errors import (
    ERROR_KINDS,
    BadRequest,
    ConfigurationError,
    GeneralError,
    MethodNotImplemented,
    NotAcceptable,
    NotFound,
    ServiceBatchError,
    ServiceError,
    TransportError,
    Unprocessable,
    convert_error,
    error_for_code,
    from_code,
    from_name,
)


class TestErrorKinds:
    """Tests for the error kind table."""

    def test_lookup_by_name(self) -> None:
        kind = from_name("NotAcceptable")
        assert kind.code == 406
        assert kind.category == "not-acceptable"
        assert kind.is_client_error

    def test_not_implemented_kind(self) -> None:
        assert from_name("NotImplemented").code == 501
        assert MethodNotImplemented().kind == "NotImplemented"

    def test_unknown_name(self) -> None:
        with pytest.raises(KeyError):
            from_name("Teapot")

    def test_lookup_by_code(self) -> None:
        assert from_code(404).name == "NotFound"
        assert from_code(418).name == "BadRequest"
        assert from_code(599).name == "GeneralError"

    def test_all_kinds_have_unique_codes(self) -> None:
        codes = [kind.code for kind in ERROR_KINDS.values()]
        assert len(codes) == len(set(codes))


class TestServiceError:
    """Tests for ServiceError serialization."""

    def test_to_dict(self) -> None:
        """The wire payload uses the external field names."""
        assert NotAcceptable("No!").to_dict() == {
            "name": "NotAcceptable",
            "message": "No!",
            "code": 406,
            "className": "not-acceptable",
            "data": None,
            "errors": {},
        }

    def test_from_dict_rebuilds_subclass(self) -> None:
        original = Unprocessable(
            "Invalid", data={"id": 1}, field_errors={"email": "required"}
        )
        rebuilt = ServiceError.from_dict(original.to_dict())

        assert isinstance(rebuilt, Unprocessable)
        assert rebuilt.message == "Invalid"
        assert rebuilt.data == {"id": 1}
        assert rebuilt.field_errors == {"email": "required"}

    def test_from_dict_unknown_kind_uses_code(self) -> None:
        rebuilt = ServiceError.from_dict(
            {"name": "Gone", "message": "bye", "code": 404, "className": "gone"}
        )
        assert isinstance(rebuilt, NotFound)
        assert rebuilt.kind == "Gone"
        assert rebuilt.category == "gone"

    def test_from_dict_null_fields_keep_kind(self) -> None:
        rebuilt = ServiceError.from_dict(
            {
                "name": "NotAcceptable",
                "message": "No!",
                "code": 406,
                "className": None,
                "errors": None,
            }
        )
        assert isinstance(rebuilt, NotAcceptable)
        assert rebuilt.code == 406
        assert rebuilt.message == "No!"
        assert rebuilt.field_errors == {}
        assert rebuilt.category == "not-acceptable"

    def test_from_dict_falls_back_to_general_error(self) -> None:
        rebuilt = ServiceError.from_dict({"message": "boom"})
        assert isinstance(rebuilt, GeneralError)
        assert rebuilt.message == "boom"

    def test_from_dict_non_mapping(self) -> None:
        rebuilt = ServiceError.from_dict("oops")
        assert isinstance(rebuilt, GeneralError)
        assert rebuilt.data == "oops"

    def test_error_for_code(self) -> None:
        error = error_for_code(400, "bad")
        assert isinstance(error, BadRequest)
        assert str(error) == "bad"

    def test_convert_error(self) -> None:
        """Plain exceptions become GeneralError; ServiceErrors pass through."""
        converted = convert_error(RuntimeError("This did not work"))
        assert isinstance(converted, GeneralError)
        assert converted.message == "This did not work"
        assert converted.code == 500

        original = NotFound("missing")
        assert convert_error(original) is original

    def test_convert_error_without_message(self) -> None:
        assert convert_error(KeyError()).message == "KeyError"


class TestLibraryErrors:
    """Tests for configuration and transport errors."""

    def test_configuration_error_message_is_verbatim(self) -> None:
        error = ConfigurationError("exact message", option="batch_service")
        assert str(error) == "exact message"
        assert error.option == "batch_service"
        assert isinstance(error, ServiceBatchError)

    def test_transport_error_context(self) -> None:
        cause = OSError("refused")
        error = TransportError(
            "Connection failed", url="http://x/batch", status_code=502, cause=cause
        )
        assert error.__cause__ is cause
        assert error.context.details["url"] == "http://x/batch"
        assert "[transport]" in str(error)

    def test_with_hint(self) -> None:
        error = TransportError("Timed out").with_hint("raise the timeout")
        assert error.context.hint == "raise the timeout"
