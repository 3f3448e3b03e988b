import logging

import requests

from sampler.models import SampleResult

logger = logging.getLogger(__name__)


class ReportError(Exception):
    """The pruning endpoint did not accept a usage report"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class UsageReporter:
    """Posts usage reports to the /remove-unused-css endpoint"""

    def __init__(self, endpoint, timeout=120, session=None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, report, action='save'):
        """
        Send a report. ``report`` is a SampleResult or an already built body.

        Returns:
            dict: the decoded JSON response
        """
        payload = report.unused if isinstance(report, SampleResult) else report

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={'X-Action': action},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Report to %s failed: %s", self.endpoint, e)
            raise ReportError(f'Could not reach {self.endpoint}') from e

        if response.status_code != 200:
            logger.error("Report to %s rejected with %s", self.endpoint, response.status_code)
            raise ReportError(f'Server answered {response.status_code}', response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ReportError('Response is not JSON', response.status_code) from e

        logger.info("Report sent (%s): %d files", action, len(payload))
        return body
