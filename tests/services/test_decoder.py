import pytest

from nativelogin.models.errors import DecodingError
from nativelogin.models.responses import HttpResponse
from nativelogin.services.decoder import ResponseDecoder
from tests.services.conftest import AUTHORIZATION_BODY, TOKEN_BODY, json_response


class TestDecodeAuthorizationResponse:
    def setup_method(self):
        self.decoder = ResponseDecoder()

    def test_decodes_community_fields_and_code(self):
        # Act
        authorization = self.decoder.decode_authorization_response(
            json_response(AUTHORIZATION_BODY)
        )

        # Assert
        assert authorization.community_url == "https://community.example.com/portal"
        assert authorization.community_id == "0DBxx0000000001"
        assert authorization.code == "auth-code-123"
        assert "auth-code-123" not in repr(authorization)

    @pytest.mark.parametrize(
        "missing", ["sfdc_community_url", "sfdc_community_id", "code"]
    )
    def test_missing_field_raises_decoding_error(self, missing: str):
        body = {k: v for k, v in AUTHORIZATION_BODY.items() if k != missing}

        with pytest.raises(DecodingError):
            self.decoder.decode_authorization_response(json_response(body))

    def test_malformed_json_raises_decoding_error(self):
        response = HttpResponse(status_code=200, content=b"<html>Oops</html>")

        with pytest.raises(DecodingError) as exc_info:
            self.decoder.decode_authorization_response(response)

        assert exc_info.value.__cause__ is not None


class TestDecodeOtpResponse:
    def setup_method(self):
        self.decoder = ResponseDecoder()

    def test_decodes_identifier(self):
        otp_response = self.decoder.decode_otp_response(
            json_response({"status": "success", "identifier": "otp-identifier-1"})
        )

        assert otp_response.status == "success"
        assert otp_response.identifier == "otp-identifier-1"

    def test_missing_identifier_raises_decoding_error(self):
        with pytest.raises(DecodingError):
            self.decoder.decode_otp_response(json_response({"status": "success"}))


class TestDecodeTokenPayload:
    def setup_method(self):
        self.decoder = ResponseDecoder()

    def test_payload_is_forwarded_verbatim(self):
        # Arrange
        response = json_response(TOKEN_BODY)

        # Act
        payload = self.decoder.decode_token_payload(response)

        # Assert
        assert payload.raw == response.content
        assert payload.content_type == "application/json"
        assert payload.as_dict()["access_token"] == "access-token-xyz"

    def test_empty_body_raises_decoding_error(self):
        with pytest.raises(DecodingError):
            self.decoder.decode_token_payload(HttpResponse(status_code=200))


class TestDescribeError:
    def setup_method(self):
        self.decoder = ResponseDecoder()

    def test_describes_oauth_error_body(self):
        description = self.decoder.describe_error(
            b'{"error": "invalid_grant", "error_description": "authentication failure"}'
        )

        assert description == "invalid_grant - authentication failure"

    def test_non_json_body_is_summarized(self):
        description = self.decoder.describe_error(b"nope")

        assert description == "unparseable response body (4 bytes)"

    def test_missing_body(self):
        assert self.decoder.describe_error(None) == "no response body"
