"""Type registry and unstructured conversion for Kubernetes objects.

The typed models generated for the kubernetes client do not know their own
apiVersion and kind; the server usually fills those fields on responses but a
locally built model leaves them blank. The Scheme maps model classes to their
group/version/kind so snapshots can always be stamped with them.
"""

from __future__ import annotations

import copy
import functools
import logging
from typing import Any, Dict, Optional, Tuple, Type

from kubernetes import client as k8s_client

from ..errors import SnapshotError, UnregisteredKindError

logger = logging.getLogger(__name__)

# model class name -> (apiVersion, kind)
BUILTIN_KINDS = {
    # core
    "V1ConfigMap": ("v1", "ConfigMap"),
    "V1Secret": ("v1", "Secret"),
    "V1Service": ("v1", "Service"),
    "V1ServiceAccount": ("v1", "ServiceAccount"),
    "V1Pod": ("v1", "Pod"),
    "V1Namespace": ("v1", "Namespace"),
    "V1PersistentVolume": ("v1", "PersistentVolume"),
    "V1PersistentVolumeClaim": ("v1", "PersistentVolumeClaim"),
    "V1Endpoints": ("v1", "Endpoints"),
    "V1LimitRange": ("v1", "LimitRange"),
    "V1ResourceQuota": ("v1", "ResourceQuota"),
    # apps
    "V1Deployment": ("apps/v1", "Deployment"),
    "V1StatefulSet": ("apps/v1", "StatefulSet"),
    "V1DaemonSet": ("apps/v1", "DaemonSet"),
    "V1ReplicaSet": ("apps/v1", "ReplicaSet"),
    # batch
    "V1Job": ("batch/v1", "Job"),
    "V1CronJob": ("batch/v1", "CronJob"),
    # rbac
    "V1Role": ("rbac.authorization.k8s.io/v1", "Role"),
    "V1RoleBinding": ("rbac.authorization.k8s.io/v1", "RoleBinding"),
    "V1ClusterRole": ("rbac.authorization.k8s.io/v1", "ClusterRole"),
    "V1ClusterRoleBinding": ("rbac.authorization.k8s.io/v1", "ClusterRoleBinding"),
    # networking
    "V1Ingress": ("networking.k8s.io/v1", "Ingress"),
    "V1IngressClass": ("networking.k8s.io/v1", "IngressClass"),
    "V1NetworkPolicy": ("networking.k8s.io/v1", "NetworkPolicy"),
    # policy / autoscaling / scheduling / storage
    "V1PodDisruptionBudget": ("policy/v1", "PodDisruptionBudget"),
    "V2HorizontalPodAutoscaler": ("autoscaling/v2", "HorizontalPodAutoscaler"),
    "V1PriorityClass": ("scheduling.k8s.io/v1", "PriorityClass"),
    "V1StorageClass": ("storage.k8s.io/v1", "StorageClass"),
    "V1Lease": ("coordination.k8s.io/v1", "Lease"),
    "V1CustomResourceDefinition": ("apiextensions.k8s.io/v1", "CustomResourceDefinition"),
}


class Scheme:
    """Registry of model classes and their apiVersion/kind.

    Unstructured dicts are self-describing and need no registration.
    """

    def __init__(self) -> None:
        self._kinds: Dict[Type[Any], Tuple[str, str]] = {}

    def register(self, model_class: Type[Any], api_version: str, kind: str) -> None:
        """Register a model class.

        Args:
            model_class: Typed model class (e.g. kubernetes.client.V1ConfigMap)
            api_version: API group/version string (e.g. "apps/v1")
            kind: Resource kind (e.g. "Deployment")
        """
        if not api_version or not kind:
            raise ValueError("api_version and kind are required")
        self._kinds[model_class] = (api_version, kind)

    def is_registered(self, model_class: Type[Any]) -> bool:
        return model_class in self._kinds

    def gvk_for_object(self, obj: Any) -> Tuple[str, str]:
        """Resolve the apiVersion and kind of an object.

        Args:
            obj: Unstructured dict, ResourceInstance, registered typed model, or
                typed model with api_version and kind set

        Returns:
            Tuple of (api_version, kind)

        Raises:
            UnregisteredKindError: If the type information cannot be resolved
        """
        if isinstance(obj, dict) or _is_resource_instance(obj):
            data = obj if isinstance(obj, dict) else obj.to_dict()
            api_version = data.get("apiVersion")
            kind = data.get("kind")
            if not api_version or not kind:
                raise UnregisteredKindError("Unstructured object is missing apiVersion or kind")
            return api_version, kind

        gvk = self._kinds.get(type(obj))
        if gvk is not None:
            return gvk

        # Unregistered models are accepted when they were built with their type fields set
        api_version = getattr(obj, "api_version", None)
        kind = getattr(obj, "kind", None)
        if isinstance(api_version, str) and isinstance(kind, str) and api_version and kind:
            return api_version, kind
        raise UnregisteredKindError(f"No kind registered for type {type(obj).__name__}")


def default_scheme() -> Scheme:
    """Create a scheme with the built-in Kubernetes types registered."""
    scheme = Scheme()
    for class_name, (api_version, kind) in BUILTIN_KINDS.items():
        model_class = getattr(k8s_client, class_name, None)
        if model_class is None:
            logger.debug(f"Model {class_name} not available in this kubernetes client, skipping")
            continue
        scheme.register(model_class, api_version, kind)
    return scheme


@functools.lru_cache(maxsize=1)
def _serializer() -> k8s_client.ApiClient:
    return k8s_client.ApiClient()


def _is_typed_model(obj: Any) -> bool:
    return isinstance(getattr(type(obj), "openapi_types", None), dict)


def _is_resource_instance(obj: Any) -> bool:
    # ResourceInstance from kubernetes.dynamic: to_dict() but no generated model attributes
    return not _is_typed_model(obj) and callable(getattr(type(obj), "to_dict", None))


def to_unstructured(obj: Any) -> Dict[str, Any]:
    """Convert an object to a plain camelCase dict.

    Args:
        obj: Unstructured dict, typed model or ResourceInstance

    Returns:
        Independent dict copy of the object

    Raises:
        SnapshotError: If the object cannot be converted
    """
    if isinstance(obj, dict):
        return copy.deepcopy(obj)

    if _is_typed_model(obj):
        data = _serializer().sanitize_for_serialization(obj)
    elif _is_resource_instance(obj):
        data = obj.to_dict()
    else:
        raise SnapshotError(f"Cannot convert {type(obj).__name__} to an unstructured object")

    if not isinstance(data, dict):
        raise SnapshotError(f"Converting {type(obj).__name__} did not produce a mapping")
    return copy.deepcopy(data)


def object_key(obj: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """Return (namespace, name) of an unstructured object."""
    metadata = obj.get("metadata") or {}
    return metadata.get("namespace"), metadata.get("name")
