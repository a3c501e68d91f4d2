"""
network functions utilities for deployregression.
"""

import redo
import requests
from mozlog import get_proxy_logger

from deployregression.config import API_URL

LOG = get_proxy_logger("Network")


def retry_get(url, **karwgs):
    """
    More robust `requests.get` equivalent function.

    This is equivalent to the requests.get function, except that
    it will retry the requests call three times in case of HTTPError or
    ConnectionError.
    """
    return redo.retry(
        get_http_session().get,
        attempts=3,
        sleeptime=1,
        retry_exceptions=(requests.exceptions.HTTPError, requests.exceptions.ConnectionError,),
        args=(url,),
        kwargs=karwgs,
    )


SESSION = None


def set_http_session(session=None, get_defaults=None):
    """
    Define a cache http session.

    :param session: a customized request session or None to use a
                    simple request session.
    :param: get_defaults: if defined, it must be a dict that will provide
        default values for calls to session.get.
    """
    global SESSION
    if get_defaults:
        if session is None:
            session = requests.Session()
        # monkey patch to set default values to a session.get calls
        # I don't see other ways to do this globally for timeout for example
        _get = session.get

        def _default_get(*args, **kwargs):
            for k, v in get_defaults.items():
                kwargs.setdefault(k, v)
            return _get(*args, **kwargs)

        session.get = _default_get
    SESSION = session


def get_http_session():
    """
    Returns the defined http session.
    """
    return SESSION or requests


class ApiClient(object):
    """
    Authenticated access to the deployments REST API.

    :param api_url: base url of the API
    :param token: bearer token, or None for anonymous requests
    :param team: team id to scope the requests to, or None for the
                 personal account
    """

    DEPLOYMENT_URL = "/v13/deployments/%s"
    DEPLOYMENTS_URL = "/v6/deployments"
    PROJECT_URL = "/v8/projects/%s"

    def __init__(self, api_url=API_URL, token=None, team=None):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.team = team

    def _headers(self):
        if self.token:
            return {"Authorization": "Bearer %s" % self.token}
        return {}

    def _get(self, path, params):
        if self.team:
            params["teamId"] = self.team
        url = self.api_url + path
        LOG.debug("Using url: %s (%s)" % (url, sorted(params.items())))
        return retry_get(url, params=params, headers=self._headers())

    def fetch(self, path, **params):
        """
        Issue a GET request and returns the decoded json body.

        HTTP errors are raised as :class:`requests.HTTPError`.
        """
        response = self._get(path, params)
        response.raise_for_status()
        return response.json()

    def _fetch_or_none(self, path, **params):
        response = self._get(path, params)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def deployment(self, hostname):
        """
        Returns the deployment data for a hostname, or None if unknown.
        """
        return self._fetch_or_none(self.DEPLOYMENT_URL % hostname)

    def deployments(self, project_id, limit, until=None, target="production", state="READY"):
        """
        Returns one page of deployments, newest first, as a tuple
        (records, next) where *next* is None on the last page.
        """
        params = {
            "projectId": project_id,
            "target": target,
            "state": state,
            "limit": limit,
        }
        if until is not None:
            params["until"] = until
        data = self.fetch(self.DEPLOYMENTS_URL, **params)
        pagination = data.get("pagination") or {}
        return data.get("deployments") or [], pagination.get("next")

    def project(self, id_or_name):
        """
        Returns the project data, or None if unknown.
        """
        return self._fetch_or_none(self.PROJECT_URL % id_or_name)
