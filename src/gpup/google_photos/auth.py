# OAuth logic
import logging
import sys
from collections.abc import Callable
from urllib.parse import parse_qs, urlparse

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow, InstalledAppFlow

from gpup.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.appendonly",
]

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"

# The cli flow never listens here; the user copies the code (or the whole
# URL) from the browser's address bar after the redirect fails.
CLI_REDIRECT_URI = "http://localhost"

OAUTH_METHODS = ("browser", "cli")


def client_config(client_id: str, client_secret: str) -> dict:
    """Build an installed-application client config without a client_secret.json file."""
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": AUTH_URI,
            "token_uri": TOKEN_URI,
            "redirect_uris": [CLI_REDIRECT_URI],
        }
    }


def browser_flow(client_id: str, client_secret: str) -> Credentials:
    """Authorize through the system browser and a short-lived localhost listener."""
    flow = InstalledAppFlow.from_client_config(
        client_config(client_id, client_secret), scopes=SCOPES
    )
    try:
        return flow.run_local_server(
            port=0,
            open_browser=True,
            authorization_prompt_message="Open the following URL to authorize: {url}",
            success_message="Authorization complete. You may close this window.",
        )
    except Exception as e:
        raise AuthenticationError(f"Browser authorization failed: {e}") from e


def extract_code(response: str) -> str:
    """
    Extract the authorization code from what the user pasted.

    Accepts the bare code or the full redirect URL.

    Raises:
        AuthenticationError: If the input is empty or carries an OAuth error
    """
    response = response.strip()
    if not response:
        raise AuthenticationError("Authorization cancelled: no code entered")
    if not response.startswith(("http://", "https://")):
        return response

    query = parse_qs(urlparse(response).query)
    if "error" in query:
        raise AuthenticationError(f"Authorization denied: {query['error'][0]}")
    codes = query.get("code")
    if not codes or not codes[0]:
        raise AuthenticationError("Authorization cancelled: no code in the pasted URL")
    return codes[0]


def cli_flow(
    client_id: str,
    client_secret: str,
    input_fn: Callable[[str], str] = input,
) -> Credentials:
    """Authorize by printing the consent URL and reading the code back from the terminal."""
    flow = Flow.from_client_config(
        client_config(client_id, client_secret),
        scopes=SCOPES,
        redirect_uri=CLI_REDIRECT_URI,
    )
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")
    print(f"Open the following URL to authorize:\n\n    {auth_url}\n", file=sys.stderr)
    print(
        "After approving, the browser is redirected to a localhost page that will not load. "
        "Paste the code (or the whole URL from the address bar) below.",
        file=sys.stderr,
    )

    try:
        response = input_fn("Enter authorization code: ")
    except EOFError as e:
        raise AuthenticationError("Authorization cancelled: no code entered") from e
    code = extract_code(response)

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        raise AuthenticationError(f"Token exchange failed: {e}") from e
    return flow.credentials


def get_credentials(
    client_id: str,
    client_secret: str,
    method: str = "browser",
    input_fn: Callable[[str], str] = input,
) -> Credentials:
    """
    Obtain OAuth credentials for the Photos Library API.

    Credentials live in memory only; every run authorizes again.

    Args:
        client_id: Google API client ID
        client_secret: Google API client secret
        method: "browser" (localhost redirect) or "cli" (code entry)
        input_fn: Prompt used by the cli method

    Returns:
        Credentials with an access token (and a refresh token when granted)

    Raises:
        ConfigurationError: If the client is not configured or method is unknown
        AuthenticationError: If the user cancels or the token exchange fails
    """
    if not client_id or not client_secret:
        raise ConfigurationError("Google client ID and client secret are required")
    if method not in OAUTH_METHODS:
        raise ConfigurationError(
            f"Unknown OAuth method {method!r}, expected one of: {', '.join(OAUTH_METHODS)}"
        )

    logger.info(f"Authorizing with the {method} OAuth flow")
    if method == "browser":
        creds = browser_flow(client_id, client_secret)
    else:
        creds = cli_flow(client_id, client_secret, input_fn=input_fn)

    if creds is None or not creds.token:
        raise AuthenticationError("Authorization did not return an access token")
    logger.debug("Authorization complete")
    return creds
