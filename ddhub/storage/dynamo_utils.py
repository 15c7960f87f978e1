"""
DynamoDB helpers shared by the artifact store and the user service.

Every function takes a boto3 ``Table`` resource rather than a table name,
so callers decide which client (real or moto) is used.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from ddhub.logutil import clogger


# =============================================================================
# DynamoDB Type Conversion
# =============================================================================
def _convert_floats_to_decimal(obj: Any) -> Any:
    """
    Recursively convert all float values to Decimal for DynamoDB compatibility.

    DynamoDB rejects Python floats. NaN and infinities have no Decimal
    representation DynamoDB accepts, so they become None.
    """
    if isinstance(obj, float):
        if obj != obj:  # NaN
            return None
        if obj in (float("inf"), float("-inf")):
            return None
        return Decimal(str(obj))
    elif isinstance(obj, dict):
        return {k: _convert_floats_to_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_convert_floats_to_decimal(item) for item in obj]
    return obj


def from_dynamo(obj: Any) -> Any:
    """
    Inverse of the boto3 deserializer quirks: Decimal → int/float,
    set → sorted list. Used before handing rows to JSON or callers.
    """
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(from_dynamo(v) for v in obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(v) for v in obj]
    return obj


# =============================================================================
# Generic DynamoDB Table Utilities
# =============================================================================
def scan_table(table: Any) -> List[Dict[str, Any]]:
    """
    Scan an entire DynamoDB table and return all items.
    Handles automatic pagination.
    """
    results: List[Dict[str, Any]] = []
    response = table.scan()
    results.extend(response.get("Items", []))

    while "LastEvaluatedKey" in response:
        response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
        results.extend(response.get("Items", []))

    return results


def save_item(table: Any, item: Dict[str, Any]) -> None:
    """
    Save a generic item to a DynamoDB table.

    Float values are converted to Decimal and None-valued attributes
    are dropped before the put.
    """
    try:
        cleaned = {k: v for k, v in _convert_floats_to_decimal(item).items() if v is not None}
        table.put_item(Item=cleaned)
        clogger.info(f"[DDB] Saved item to {table.name}")
    except ClientError as e:
        clogger.error(f"[DDB] Failed to save item to {table.name}: {e}")
        raise


def load_item(table: Any, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Load a generic item from a DynamoDB table by its key.
    """
    try:
        response = table.get_item(Key=key)
    except ClientError as e:
        clogger.error(f"[DDB] Failed to load item from {table.name} with key={key}: {e}")
        raise

    item = response.get("Item")
    if item:
        clogger.debug(f"[DDB] Loaded item from {table.name} with key={key}")
    else:
        clogger.debug(f"[DDB] No item found in {table.name} with key={key}")
    return item


def delete_item(table: Any, key: Dict[str, Any]) -> None:
    """
    Delete one item by key. DynamoDB deletes are idempotent.
    """
    try:
        table.delete_item(Key=key)
        clogger.info(f"[DDB] Deleted item from {table.name} with key={key}")
    except ClientError as e:
        clogger.error(f"[DDB] Failed to delete item from {table.name} with key={key}: {e}")
        raise


def increment_counter(table: Any, key: Dict[str, Any], attribute: str) -> int:
    """
    Atomically add 1 to a numeric attribute of an existing item.
    Returns the new value.

    Raises:
        ClientError: ConditionalCheckFailedException when the item does not exist
    """
    response = table.update_item(
        Key=key,
        UpdateExpression="ADD #attr :inc",
        ConditionExpression="attribute_exists(#pk)",
        ExpressionAttributeNames={"#attr": attribute, "#pk": next(iter(key))},
        ExpressionAttributeValues={":inc": 1},
        ReturnValues="UPDATED_NEW",
    )
    return int(response["Attributes"][attribute])
