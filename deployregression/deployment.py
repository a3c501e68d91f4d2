"""
The Deployment class, used to store information about one published
build of a project.
"""

from collections import namedtuple

from deployregression.dates import format_timestamp, to_datetime

FIELDS = []

Commit = namedtuple("Commit", "sha, message")

# meta keys of the source control providers, in lookup order
COMMIT_PROVIDERS = ("github", "gitlab", "bitbucket")


def export(func):
    FIELDS.append(func.__name__)
    return func


class Deployment(object):
    """
    Store information about a deployment.

    A Deployment is immutable, and is usually built from the json data
    of the API with :meth:`from_api`.
    """

    def __init__(self, uid, url, project_id, owner_id, created, target=None, state=None,
                 meta=None):
        self._uid = uid
        self._url = url
        self._project_id = project_id
        self._owner_id = owner_id
        self._created = created
        self._target = target
        self._state = state
        self._meta = meta or {}

    @classmethod
    def from_api(cls, data):
        return cls(
            uid=data.get("uid") or data.get("id"),
            url=data["url"],
            project_id=data.get("projectId"),
            owner_id=data.get("ownerId") or (data.get("creator") or {}).get("uid"),
            created=data.get("created") or data.get("createdAt"),
            target=data.get("target"),
            state=data.get("state") or data.get("readyState"),
            meta=data.get("meta"),
        )

    @property
    @export
    def uid(self):
        """
        The opaque identifier of the deployment
        """
        return self._uid

    @property
    @export
    def url(self):
        """
        The hostname of the deployment, without scheme
        """
        return self._url

    @property
    @export
    def project_id(self):
        return self._project_id

    @property
    @export
    def owner_id(self):
        """
        The account (user or team) owning the deployment
        """
        return self._owner_id

    @property
    @export
    def created(self):
        """
        Creation time, in milliseconds since the epoch
        """
        return self._created

    @property
    @export
    def target(self):
        """
        The target environment, e.g. 'production'. Can be None for
        preview deployments.
        """
        return self._target

    @property
    def state(self):
        return self._state

    @property
    def meta(self):
        return dict(self._meta)

    @property
    def created_date(self):
        return to_datetime(self._created)

    @property
    def commit(self):
        """
        A :class:`Commit` for the deployment, or None if the deployment
        was not created from a source control provider.
        """
        for provider in COMMIT_PROVIDERS:
            sha = self._meta.get("%sCommitSha" % provider)
            if sha:
                return Commit(sha, self._meta.get("%sCommitMessage" % provider))
        return None

    @property
    @export
    def short_sha(self):
        commit = self.commit
        if commit is None:
            return None
        return commit.sha[:7]

    def full_url(self, path=""):
        return "https://%s%s" % (self._url, path or "")

    def describe(self):
        """
        Returns a one line description, for logging.
        """
        desc = "%s (created %s" % (self._url, format_timestamp(self._created))
        commit = self.commit
        if commit:
            desc += ", commit %s" % commit.sha[:7]
        return desc + ")"

    def to_dict(self):
        """
        Export some public properties as a dict.
        """
        return dict((field, getattr(self, field)) for field in FIELDS)

    def __eq__(self, other):
        if not isinstance(other, Deployment):
            return NotImplemented
        return self._uid == other._uid

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._uid)

    def __repr__(self):
        return "<Deployment %s %s>" % (self._uid, self._url)

    def __str__(self):
        return self._url
