from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from equipment.models import AuditEvent

User = get_user_model()


def log_action(*, user, action: str, obj=None, object_type: Optional[str]=None, object_id=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    """Record who did what to which row.  ``obj`` fills type and id when given."""
    if obj is not None:
        object_type = object_type or type(obj).__name__
        object_id = obj.pk if object_id is None else object_id
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) and user.pk else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
