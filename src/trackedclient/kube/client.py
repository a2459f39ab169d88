"""Kubernetes object client.

Thin adapter over the dynamic client of the official kubernetes package that
accepts typed models or unstructured dicts and returns plain dicts.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.dynamic import DynamicClient

from ..config import Config
from .options import CreateOptions, DeleteOptions
from .scheme import Scheme, default_scheme, object_key, to_unstructured

logger = logging.getLogger(__name__)

MERGE_PATCH = "application/merge-patch+json"


class ObjectClient(Protocol):
    """Object storage operations the tracking wrapper relies on."""

    @property
    def scheme(self) -> Scheme: ...

    def create(
        self, obj: Any, options: Optional[CreateOptions] = None, request_timeout: Optional[float] = None
    ) -> Dict[str, Any]: ...

    def delete(
        self, obj: Any, options: Optional[DeleteOptions] = None, request_timeout: Optional[float] = None
    ) -> None: ...


def create_dynamic_client(config: Optional[Config] = None) -> DynamicClient:
    """Create a dynamic client from kubeconfig or in-cluster credentials.

    Args:
        config: Connection settings (default: Config.load())

    Returns:
        Connected DynamicClient (performs API discovery)
    """
    if config is None:
        config = Config.load()

    configuration = k8s_client.Configuration()
    if config.in_cluster:
        logger.debug("Loading in-cluster Kubernetes configuration")
        k8s_config.load_incluster_config(client_configuration=configuration)
    else:
        logger.debug(f"Loading kubeconfig {config.kubeconfig or '(default)'} context {config.context or '(current)'}")
        k8s_config.load_kube_config(
            config_file=config.kubeconfig,
            context=config.context,
            client_configuration=configuration,
        )

    return DynamicClient(k8s_client.ApiClient(configuration))


class KubernetesClient:
    """Generic object client backed by kubernetes.dynamic.

    Every operation resolves the target resource from the object's apiVersion
    and kind. API failures surface as kubernetes.dynamic.exceptions errors.

    Attributes:
        dynamic: Underlying DynamicClient
        field_manager: Default field manager for writes (optional)
    """

    def __init__(
        self,
        dynamic: DynamicClient,
        scheme: Optional[Scheme] = None,
        field_manager: Optional[str] = None,
    ) -> None:
        self.dynamic = dynamic
        self.field_manager = field_manager
        self._scheme = scheme or default_scheme()

    @property
    def scheme(self) -> Scheme:
        return self._scheme

    def _resource(self, api_version: str, kind: str) -> Any:
        return self.dynamic.resources.get(api_version=api_version, kind=kind)

    def _prepare(self, obj: Any) -> Tuple[Dict[str, Any], Any]:
        """Convert an object to a request body and look up its API resource."""
        body = to_unstructured(obj)
        if not body.get("apiVersion") or not body.get("kind"):
            api_version, kind = self._scheme.gvk_for_object(obj)
            body["apiVersion"] = api_version
            body["kind"] = kind
        return body, self._resource(body["apiVersion"], body["kind"])

    @staticmethod
    def _params(request_timeout: Optional[float], **params: Any) -> Dict[str, Any]:
        params = {key: value for key, value in params.items() if value is not None}
        if request_timeout is not None:
            params["_request_timeout"] = request_timeout
        return params

    def create(
        self,
        obj: Any,
        options: Optional[CreateOptions] = None,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Create an object.

        Args:
            obj: Typed model or unstructured dict
            options: Create options (optional)
            request_timeout: Per-request timeout in seconds (optional)

        Returns:
            The object as stored by the server
        """
        options = options or CreateOptions()
        if options.field_manager is None and self.field_manager:
            options = dataclasses.replace(options, field_manager=self.field_manager)
        body, resource = self._prepare(obj)
        namespace, name = object_key(body)
        params = self._params(request_timeout, **options.to_params())

        created = resource.create(body=body, namespace=namespace if resource.namespaced else None, **params)
        logger.debug(f"Created {body['kind']} {namespace or ''}/{name or ''}")
        return created.to_dict()

    def delete(
        self,
        obj: Any,
        options: Optional[DeleteOptions] = None,
        request_timeout: Optional[float] = None,
    ) -> None:
        """Delete an object identified by its apiVersion, kind, namespace and name.

        Args:
            obj: Typed model or unstructured dict
            options: Delete options, sent as the request body (optional)
            request_timeout: Per-request timeout in seconds (optional)
        """
        options = options or DeleteOptions()
        body, resource = self._prepare(obj)
        namespace, name = object_key(body)
        if not name:
            raise ValueError(f"Cannot delete {body['kind']} without metadata.name")

        resource.delete(
            name=name,
            namespace=namespace if resource.namespaced else None,
            body=options.to_body(),
            **self._params(request_timeout),
        )
        logger.debug(f"Deleted {body['kind']} {namespace or ''}/{name}")

    def get(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        resource = self._resource(api_version, kind)
        return resource.get(name=name, namespace=namespace, **self._params(request_timeout)).to_dict()

    def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
        field_selector: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """List objects of a kind, optionally filtered by namespace and selectors."""
        resource = self._resource(api_version, kind)
        result = resource.get(
            namespace=namespace,
            **self._params(request_timeout, label_selector=label_selector, field_selector=field_selector),
        )
        return result.to_dict()

    def update(self, obj: Any, request_timeout: Optional[float] = None) -> Dict[str, Any]:
        body, resource = self._prepare(obj)
        namespace, _ = object_key(body)
        updated = resource.replace(body=body, namespace=namespace, **self._params(request_timeout))
        return updated.to_dict()

    def patch(
        self,
        obj: Any,
        patch: Any,
        patch_type: str = MERGE_PATCH,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        body, resource = self._prepare(obj)
        namespace, name = object_key(body)
        patched = resource.patch(
            body=patch,
            name=name,
            namespace=namespace,
            content_type=patch_type,
            **self._params(request_timeout),
        )
        return patched.to_dict()

    def update_status(self, obj: Any, request_timeout: Optional[float] = None) -> Dict[str, Any]:
        body, resource = self._prepare(obj)
        namespace, _ = object_key(body)
        status = resource.subresources["status"]
        return status.replace(body=body, namespace=namespace, **self._params(request_timeout)).to_dict()

    def patch_status(
        self,
        obj: Any,
        patch: Any,
        patch_type: str = MERGE_PATCH,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        body, resource = self._prepare(obj)
        namespace, name = object_key(body)
        status = resource.subresources["status"]
        patched = status.patch(
            body=patch,
            name=name,
            namespace=namespace,
            content_type=patch_type,
            **self._params(request_timeout),
        )
        return patched.to_dict()

    def watch(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Stream change events for a kind.

        Yields:
            Dicts with "type" (ADDED, MODIFIED, DELETED) and "object" (unstructured dict)
        """
        resource = self._resource(api_version, kind)
        for event in resource.watch(namespace=namespace, label_selector=label_selector, timeout=timeout):
            yield {"type": event["type"], "object": event["raw_object"]}
