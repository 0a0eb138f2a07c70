"""Tool description text for the endpoint tool."""

from __future__ import annotations

ENDPOINT_DESCRIPTION = """Test a REST API endpoint and get detailed response information.

Base URL: {base_url}

Authentication: {auth}

The tool automatically:
- Normalizes endpoints (adds leading slash, removes trailing slashes)
- Handles authentication header injection
- Accepts any HTTP status code as valid
- Returns detailed response information including:
  * Full URL called
  * Status code and text
  * Response headers
  * Response body
  * Request details (method, headers, body)
  * Response timing
  * Validation messages

Error Handling:
- Network errors are caught and returned with descriptive messages
- Invalid status codes are still returned with full response details
- Authentication errors include the attempted auth method
"""


def endpoint_description(base_url: str, auth: str) -> str:
    return ENDPOINT_DESCRIPTION.format(base_url=base_url, auth=auth)
