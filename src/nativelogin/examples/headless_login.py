"""
Log in through the Headless Identity API from the command line.

You'll need NATIVE_LOGIN_CLIENT_ID, NATIVE_LOGIN_REDIRECT_URI and
NATIVE_LOGIN_LOGIN_URL set in the environment or a .env file.

Password login:      python headless_login.py user@example.com
Passwordless login:  python headless_login.py user@example.com --otp <recaptcha-token>
"""

import asyncio
import getpass
import json
import logging
import sys

from nativelogin.config import NativeLoginConfig
from nativelogin.models.responses import TokenPayload
from nativelogin.models.results import NativeLoginResult, OtpVerificationMethod
from nativelogin.services.login import NativeLoginManager


class PrintingSessionSink:
    def create_session(self, token_payload: TokenPayload, context) -> None:
        token = token_payload.as_dict()
        logging.info(f"Session created for {token.get('id', 'unknown user')}")
        print(json.dumps({"instance_url": token.get("instance_url")}, indent=2))


async def main(username: str, recaptcha_token: str | None) -> NativeLoginResult:
    config = NativeLoginConfig.from_env()

    manager = NativeLoginManager(config, session_sink=PrintingSessionSink())
    async with manager:
        if recaptcha_token is None:
            password = getpass.getpass("Password: ")
            return await manager.login(username, password)

        otp_request = await manager.submit_otp_request(
            username,
            recaptcha_token,
            verification_method=OtpVerificationMethod.EMAIL,
        )
        if not otp_request.is_success():
            return otp_request.result

        otp = input("One-time passcode: ")
        return await manager.submit_passwordless_authorization_request(
            otp, otp_request.otp_identifier, OtpVerificationMethod.EMAIL
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    args = sys.argv[1:]
    if not args:
        sys.exit(__doc__)

    token = args[2] if len(args) > 2 and args[1] == "--otp" else None
    result = asyncio.run(main(args[0], token))
    print(f"Login result: {result.value}")
    sys.exit(0 if result is NativeLoginResult.SUCCESS else 1)
