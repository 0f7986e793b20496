"""Kubernetes API wrapper for the KubeSphere application resources."""

from __future__ import annotations

from kubernetes import client, config

from chart_importer.config.settings import API_GROUP, API_VERSION

APPLICATIONS = "applications"
APPLICATION_VERSIONS = "applicationversions"


class K8sClient:
    """Thin wrapper around the Kubernetes custom objects API.

    Objects are exchanged as plain dicts; the client never maps them onto a
    typed model.
    """

    def __init__(self, context: str | None = None, request_timeout: float = 30.0):
        self.context = context
        self.request_timeout = request_timeout
        self._custom: client.CustomObjectsApi | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    def connect(self) -> None:
        """Load cluster credentials eagerly so a bad config fails the run early."""
        _ = self.custom

    def list_applications(self, label_selector: str) -> list[dict]:
        return self._list(APPLICATIONS, label_selector)

    def list_application_versions(self, label_selector: str) -> list[dict]:
        return self._list(APPLICATION_VERSIONS, label_selector)

    def replace(self, plural: str, obj: dict) -> dict:
        return self.custom.replace_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=plural,
            name=obj["metadata"]["name"],
            body=obj,
        )

    def replace_status(self, plural: str, obj: dict) -> dict:
        return self.custom.replace_cluster_custom_object_status(
            group=API_GROUP,
            version=API_VERSION,
            plural=plural,
            name=obj["metadata"]["name"],
            body=obj,
        )

    def _list(self, plural: str, label_selector: str) -> list[dict]:
        result = self.custom.list_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=plural,
            label_selector=label_selector,
            _request_timeout=self.request_timeout,
        )
        return result.get("items", [])
