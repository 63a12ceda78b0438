from flask import current_app
import requests

from guessage.services.games.errors import UpstreamError, UpstreamTimeout


class AgeOracle:
    """Client for the agify.io age-from-name API.

    Configured from the app (``AGE_API_URL``, ``AGE_API_COUNTRY``,
    ``AGE_API_TIMEOUT_SEC``). Every request carries a timeout; a request that
    times out or cannot connect raises ``UpstreamTimeout`` instead of hanging
    the page.
    """

    def __init__(self, app=None, http=None):
        self.base_url = 'https://api.agify.io'
        self.country = None
        self.timeout = 5.0
        self.http = http or requests.Session()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.base_url = app.config.get('AGE_API_URL', self.base_url)
        self.country = app.config.get('AGE_API_COUNTRY') or None
        self.timeout = float(app.config.get('AGE_API_TIMEOUT_SEC', self.timeout))
        app.extensions['age_oracle'] = self

    def lookup(self, name: str):
        """Return the inferred age for ``name``, or None if the API has no idea."""
        params = {'name': name}
        if self.country:
            params['country_id'] = self.country
        try:
            resp = self.http.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.Timeout, requests.ConnectionError) as exc:
            current_app.logger.error(f"[oracle] timeout looking up name={name!r}: {exc}")
            raise UpstreamTimeout(f'Age lookup for {name!r} timed out') from exc
        except (requests.RequestException, ValueError) as exc:
            current_app.logger.error(f"[oracle] bad response for name={name!r}: {exc}")
            raise UpstreamError(f'Age lookup for {name!r} failed') from exc

        age = data.get('age') if isinstance(data, dict) else None
        current_app.logger.debug(f"[oracle] name={name!r} age={age}")
        if age is None:
            return None
        try:
            return int(age)
        except (TypeError, ValueError):
            return None


age_oracle = AgeOracle()
