import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from spendwise.core.exceptions import StoreError
from spendwise.db.interface import ExpenseStore, sort_expenses, sort_goals
from spendwise.models.expense import ExpenseInDB
from spendwise.models.goal import SavingGoalInDB
from spendwise.models.user import UserInDB

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoStore(ExpenseStore):
    """
    DynamoDB-backed store.

    Table layout:
      users:    PK user_id, GSI "email-index" on email
      expenses: PK user_id, SK expense_id
      goals:    PK user_id, SK goal_id
    """

    def __init__(self, dynamodb, users_table: str, expenses_table: str, goals_table: str):
        self.users_table = dynamodb.Table(users_table)
        self.expenses_table = dynamodb.Table(expenses_table)
        self.goals_table = dynamodb.Table(goals_table)

    # Users

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Query the Users table by email (assumes a GSI exists on email)."""
        try:
            response = self.users_table.query(
                IndexName="email-index",
                KeyConditionExpression=Key("email").eq(email),
            )
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get_user_by_email", e)
        items = response.get("Items", [])
        return UserInDB.model_validate(_from_dynamo(items[0])) if items else None

    def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        try:
            response = self.users_table.get_item(Key={"user_id": user_id})
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get_user_by_id", e)
        item = response.get("Item")
        return UserInDB.model_validate(_from_dynamo(item)) if item else None

    def put_user(self, user: UserInDB) -> None:
        try:
            self.users_table.put_item(Item=_convert_for_dynamo(user.model_dump(mode="json")))
        except (ClientError, BotoCoreError) as e:
            raise _store_error("put_user", e)

    # Expenses

    def put_expense(self, expense: ExpenseInDB) -> None:
        try:
            self.expenses_table.put_item(Item=_convert_for_dynamo(expense.model_dump(mode="json")))
        except (ClientError, BotoCoreError) as e:
            raise _store_error("put_expense", e)

    def get_expense(self, user_id: str, expense_id: str) -> Optional[ExpenseInDB]:
        try:
            response = self.expenses_table.get_item(Key={"user_id": user_id, "expense_id": expense_id})
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get_expense", e)
        item = response.get("Item")
        return ExpenseInDB.model_validate(_from_dynamo(item)) if item else None

    def list_expenses(self, user_id: str) -> List[ExpenseInDB]:
        items = self._query_user(self.expenses_table, user_id, "list_expenses")
        return sort_expenses([ExpenseInDB.model_validate(item) for item in items])

    def update_expense(self, user_id: str, expense_id: str, updates: Dict[str, Any]) -> Optional[ExpenseInDB]:
        item = self._update(
            self.expenses_table,
            {"user_id": user_id, "expense_id": expense_id},
            "expense_id",
            updates,
            "update_expense",
        )
        return ExpenseInDB.model_validate(item) if item else None

    def delete_expense(self, user_id: str, expense_id: str) -> bool:
        return self._delete(self.expenses_table, {"user_id": user_id, "expense_id": expense_id}, "delete_expense")

    # Saving goals

    def put_goal(self, goal: SavingGoalInDB) -> None:
        try:
            self.goals_table.put_item(Item=_convert_for_dynamo(goal.model_dump(mode="json")))
        except (ClientError, BotoCoreError) as e:
            raise _store_error("put_goal", e)

    def get_goal(self, user_id: str, goal_id: str) -> Optional[SavingGoalInDB]:
        try:
            response = self.goals_table.get_item(Key={"user_id": user_id, "goal_id": goal_id})
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get_goal", e)
        item = response.get("Item")
        return SavingGoalInDB.model_validate(_from_dynamo(item)) if item else None

    def list_goals(self, user_id: str) -> List[SavingGoalInDB]:
        items = self._query_user(self.goals_table, user_id, "list_goals")
        return sort_goals([SavingGoalInDB.model_validate(item) for item in items])

    def update_goal(self, user_id: str, goal_id: str, updates: Dict[str, Any]) -> Optional[SavingGoalInDB]:
        item = self._update(
            self.goals_table,
            {"user_id": user_id, "goal_id": goal_id},
            "goal_id",
            updates,
            "update_goal",
        )
        return SavingGoalInDB.model_validate(item) if item else None

    def delete_goal(self, user_id: str, goal_id: str) -> bool:
        return self._delete(self.goals_table, {"user_id": user_id, "goal_id": goal_id}, "delete_goal")

    def add_goal_progress(self, user_id: str, goal_id: str, amount: float) -> Optional[SavingGoalInDB]:
        """
        Increment current_amount with a single ADD update so concurrent
        contributions are never lost to a read-then-write.
        """
        try:
            response = self.goals_table.update_item(
                Key={"user_id": user_id, "goal_id": goal_id},
                UpdateExpression="ADD current_amount :amount",
                ConditionExpression="attribute_exists(goal_id)",
                ExpressionAttributeValues={":amount": _convert_for_dynamo(float(amount))},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                return None
            raise _store_error("add_goal_progress", e)
        except BotoCoreError as e:
            raise _store_error("add_goal_progress", e)
        attributes = response.get("Attributes")
        return SavingGoalInDB.model_validate(_from_dynamo(attributes)) if attributes else None

    def status(self) -> Dict[str, Any]:
        tables = {}
        for label, table in (
            ("users", self.users_table),
            ("expenses", self.expenses_table),
            ("goals", self.goals_table),
        ):
            try:
                table.scan(Limit=1)
                tables[label] = {"name": table.name, "status": "accessible"}
            except (ClientError, BotoCoreError) as e:
                logger.error(f"DynamoDB check failed for {table.name}: {e}")
                tables[label] = {"name": table.name, "status": "error", "error": str(e)}
        return {
            "backend": "dynamodb",
            "connected": all(t["status"] == "accessible" for t in tables.values()),
            "tables": tables,
        }

    # Helpers

    def _query_user(self, table, user_id: str, operation: str) -> List[Dict[str, Any]]:
        """Query every item in the user's partition, following pagination."""
        items: List[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {"KeyConditionExpression": Key("user_id").eq(user_id)}
        try:
            while True:
                response = table.query(**kwargs)
                items.extend(_from_dynamo(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise _store_error(operation, e)
        return items

    def _update(
        self,
        table,
        key: Dict[str, str],
        id_attribute: str,
        updates: Dict[str, Any],
        operation: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Apply partial updates to an existing item. Returns the updated item,
        or None when the item does not exist.
        """
        if not updates:
            return None

        update_expression_parts = []
        expression_attribute_values = {}
        expression_attribute_names = {}

        for idx, (field, value) in enumerate(updates.items()):
            placeholder = f"#f{idx}"
            value_placeholder = f":v{idx}"
            update_expression_parts.append(f"{placeholder} = {value_placeholder}")
            expression_attribute_names[placeholder] = field
            expression_attribute_values[value_placeholder] = value

        try:
            response = table.update_item(
                Key=key,
                UpdateExpression="SET " + ", ".join(update_expression_parts),
                ConditionExpression=f"attribute_exists({id_attribute})",
                ExpressionAttributeNames=expression_attribute_names,
                ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                return None
            raise _store_error(operation, e)
        except BotoCoreError as e:
            raise _store_error(operation, e)
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None

    def _delete(self, table, key: Dict[str, str], operation: str) -> bool:
        try:
            response = table.delete_item(Key=key, ReturnValues="ALL_OLD")
        except (ClientError, BotoCoreError) as e:
            raise _store_error(operation, e)
        return "Attributes" in response


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


def _store_error(operation: str, error: Exception) -> StoreError:
    if isinstance(error, ClientError):
        message = error.response.get("Error", {}).get("Message", str(error))
    else:
        message = str(error)
    logger.error(f"{operation} failed: {message}")
    return StoreError(f"{operation} failed: {message}")


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal and dates to ISO strings for DynamoDB.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
