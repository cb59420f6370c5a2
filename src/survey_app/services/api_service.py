"""HTTP client for the row store and object store."""
import requests
import logging

# Row store table -> API endpoint
TABLE_ENDPOINTS = {
    'fire_door_surveys': '/api/surveys',
}


class TransportError(Exception):
    """A request that failed to reach the store or was rejected by it."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class APIService:
    """Client for the backend stores.

    Each call makes exactly one request; there is no retry or offline
    queueing. Any failure raises TransportError.
    """

    def __init__(self, base_url='http://localhost:5000', timeout=10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    def _make_request(self, method, endpoint, **kwargs):
        """Send one request and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = requests.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{method} {endpoint} failed: {e}")
            raise TransportError(f"Could not reach the server: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get('error') or response.reason
            except ValueError:
                message = response.reason
            self.logger.warning(f"{method} {endpoint} returned {response.status_code}: {message}")
            raise TransportError(message or f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON in response from {endpoint}", status_code=response.status_code) from e

    def _table_endpoint(self, table):
        try:
            return TABLE_ENDPOINTS[table]
        except KeyError:
            raise ValueError(f"Unknown table '{table}'")

    # Row store
    def insert(self, table, row):
        """Insert one row; returns it as stored (with id and created_at)."""
        return self._make_request('POST', self._table_endpoint(table), json=row)

    def select(self, table, columns=None, filters=None, order=None, limit=None):
        """Select rows.

        Args:
            table: Table name
            columns: Column names to return (all when None)
            filters: column -> value equality filters
            order: '<column>.asc' or '<column>.desc'
            limit: Maximum number of rows
        """
        params = {}
        if columns:
            params['columns'] = ','.join(columns)
        if order:
            params['order'] = order
        if limit:
            params['limit'] = limit
        for name, value in (filters or {}).items():
            params[name] = str(value).lower() if isinstance(value, bool) else value
        data = self._make_request('GET', self._table_endpoint(table), params=params)
        return data.get(table, [])

    def get(self, table, row_id):
        return self._make_request('GET', f"{self._table_endpoint(table)}/{row_id}")

    def delete(self, table, row_id):
        return self._make_request('DELETE', f"{self._table_endpoint(table)}/{row_id}")

    # Object store
    def upload(self, bucket, key, data, content_type='application/octet-stream'):
        """Upload bytes; returns {'key', 'url'}."""
        files = {'file': (key, data, content_type)}
        return self._make_request('POST', f"/api/storage/{bucket}", files=files, data={'key': key})

    def get_public_url(self, bucket, key):
        return self._make_request('GET', f"/api/storage/{bucket}/url", params={'key': key})['url']

    def remove(self, bucket, keys):
        """Remove objects; returns {'removed': [...], 'failed': [...]}."""
        return self._make_request('DELETE', f"/api/storage/{bucket}", json={'keys': list(keys)})
