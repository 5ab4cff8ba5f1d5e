# errors.py


class DashboardError(Exception):
    """Base error for the dashboard; carries the HTTP status the API answers with."""
    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(DashboardError):
    status_code = 400


class NotFoundError(DashboardError):
    status_code = 404


class ConfigurationError(DashboardError):
    status_code = 500
