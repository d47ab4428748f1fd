"""
Minimal SOAP/RPC client for the RadioReference web service.

Requests are built from a fixed envelope template rather than a WSDL; the
response body is returned as raw text for the markup extractor.
"""

import logging
from typing import Optional, Union

import requests

from ..exceptions import TransportError

logger = logging.getLogger(__name__)

RR_SOAP_URL = "https://api.radioreference.com/soap2/"
RR_NAMESPACE = "http://api.radioreference.com/soap2"

OPERATIONS = frozenset({
    "getZipcodeInfo",
    "getCountyInfo",
    "getStateInfo",
    "getSubcatFreqs",
    "getTrsDetails",
    "getTrsSites",
    "getTrsTalkgroups",
})

ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope
  xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"
  xmlns:soapenc="http://schemas.xmlsoap.org/soap/encoding/"
  xmlns:tns="{namespace}"
  xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
  xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <soap:Body soap:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
    <tns:{operation}>
      {params}
      {auth}
    </tns:{operation}>
  </soap:Body>
</soap:Envelope>"""

AUTH_TEMPLATE = """<authInfo xsi:type="tns:authInfo">
        <appKey xsi:type="xsd:string">{app_key}</appKey>
        <username xsi:type="xsd:string">{username}</username>
        <password xsi:type="xsd:string">{password}</password>
        <version xsi:type="xsd:string">latest</version>
        <style xsi:type="xsd:string">rpc</style>
      </authInfo>"""


def escape_xml(value: object) -> str:
    """Escape a value for interpolation into element text."""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def param(name: str, value: Union[int, str], xsd_type: str = "int") -> str:
    """Build one typed parameter element."""
    return f'<{name} xsi:type="xsd:{xsd_type}">{escape_xml(value)}</{name}>'


class RadioReferenceRPC:
    """
    Issues named operations against the provider.

    Each call carries the application key and the caller's own account
    credentials. There is no retry logic here: callers decide how to bound
    concurrency and whether a failed call is fatal.
    """

    def __init__(
        self,
        app_key: str,
        username: str,
        password: str,
        url: str = RR_SOAP_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.app_key = app_key
        self.username = username
        self.password = password
        self.url = url
        self.timeout = timeout

        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": "freqfinder/0.1",
            "Content-Type": "text/xml; charset=utf-8",
        })

    def auth_block(self) -> str:
        return AUTH_TEMPLATE.format(
            app_key=escape_xml(self.app_key),
            username=escape_xml(self.username),
            password=escape_xml(self.password),
        )

    def build_envelope(self, operation: str, params: str = "") -> str:
        """Wrap an already-escaped parameter fragment in a request envelope."""
        return ENVELOPE_TEMPLATE.format(
            namespace=RR_NAMESPACE,
            operation=operation,
            params=params,
            auth=self.auth_block(),
        )

    def call(self, operation: str, params: str = "") -> str:
        """
        Invoke a remote operation.

        Args:
            operation: One of ``OPERATIONS``
            params: Parameter markup, values already escaped

        Returns:
            The raw response document

        Raises:
            TransportError: On connection failure or a non-success status
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation {operation}")

        body = self.build_envelope(operation, params)
        headers = {"SOAPAction": f"{RR_NAMESPACE}#{operation}"}
        logger.debug(f"SOAP {operation} -> {self.url}")

        try:
            response = self._session.post(
                self.url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"SOAP {operation} failed: {e}")
            raise TransportError(f"{operation}: {e}") from e

        if not response.ok:
            logger.error(
                f"SOAP {operation} failed ({response.status_code}): {response.text[:500]}"
            )
            raise TransportError(
                f"RadioReference API returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        return response.text
