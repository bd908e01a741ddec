"""
Product Resolver Lambda Function Handler
Resolves the product queries and mutations of the AppSync GraphQL API
against the DynamoDB product table
"""
import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from config import get_category_index_name, get_log_level, get_table_name

logger = logging.getLogger()
logger.setLevel(get_log_level())

# Product attributes that updateProduct may change
UPDATABLE_FIELDS = ('name', 'description', 'price', 'category', 'sku', 'inventory')

_table = None


class ProductNotFoundError(Exception):
    """Raised when a mutation targets a product that does not exist"""


class ProductAlreadyExistsError(Exception):
    """Raised when createProduct is given an id that is already stored"""


def get_table():
    """Get the product table, created on first use"""
    global _table
    if _table is None:
        _table = boto3.resource('dynamodb').Table(get_table_name())
    return _table


def lambda_handler(event, context):
    """
    Main handler for AppSync direct Lambda resolvers
    Fields:
    - Query.getProductById(productId)
    - Query.listProducts
    - Query.productsByCategory(category)
    - Mutation.createProduct(product)
    - Mutation.deleteProduct(productId)
    - Mutation.updateProduct(product)
    """
    info = event.get('info', {})
    field_name = info.get('fieldName')
    arguments = event.get('arguments') or {}

    try:
        resolver = FIELD_RESOLVERS.get(field_name)
        if resolver is None:
            raise ValueError(f"Unsupported field: {field_name}")

        logger.info(f"Resolving {info.get('parentTypeName', '')}.{field_name}")
        return to_graphql(resolver(arguments))
    except Exception as e:
        logger.error(f"{field_name} failed: {e}", exc_info=True)
        raise


def get_product_by_id(arguments: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    product_id = _require(arguments, 'productId')
    response = get_table().get_item(Key={'id': product_id})
    return response.get('Item')


def list_products(arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Scan the whole table, following pagination"""
    table = get_table()
    response = table.scan()
    items = response.get('Items', [])

    while 'LastEvaluatedKey' in response:
        response = table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
        items.extend(response.get('Items', []))

    return items


def products_by_category(arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Query the category index, following pagination"""
    category = _require(arguments, 'category')
    table = get_table()
    query_args = {
        'IndexName': get_category_index_name(),
        'KeyConditionExpression': Key('category').eq(category)
    }

    response = table.query(**query_args)
    items = response.get('Items', [])

    while 'LastEvaluatedKey' in response:
        response = table.query(ExclusiveStartKey=response['LastEvaluatedKey'], **query_args)
        items.extend(response.get('Items', []))

    return items


def create_product(arguments: Dict[str, Any]) -> Dict[str, Any]:
    product = {
        field: value for field, value in to_dynamodb(_require(arguments, 'product')).items()
        if value is not None
    }
    product['id'] = product.get('id') or str(uuid.uuid4())

    try:
        get_table().put_item(
            Item=product,
            ConditionExpression=Attr('id').not_exists()
        )
    except ClientError as e:
        if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
            raise ProductAlreadyExistsError(f"Product {product['id']} already exists") from e
        raise

    return product


def delete_product(arguments: Dict[str, Any]) -> str:
    product_id = _require(arguments, 'productId')
    get_table().delete_item(Key={'id': product_id})
    return product_id


def update_product(arguments: Dict[str, Any]) -> Dict[str, Any]:
    product = to_dynamodb(_require(arguments, 'product'))
    product_id = _require(product, 'id')

    changes = {
        field: value for field, value in product.items()
        if field in UPDATABLE_FIELDS and value is not None
    }
    if not changes:
        raise ValueError(f"No fields to update for product {product_id}")

    # Attribute names go through placeholders; "name" is a reserved word
    update_expression = 'SET ' + ', '.join(f"#{field} = :{field}" for field in changes)

    try:
        response = get_table().update_item(
            Key={'id': product_id},
            UpdateExpression=update_expression,
            ExpressionAttributeNames={f"#{field}": field for field in changes},
            ExpressionAttributeValues={f":{field}": value for field, value in changes.items()},
            ConditionExpression=Attr('id').exists(),
            ReturnValues='ALL_NEW'
        )
    except ClientError as e:
        if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
            raise ProductNotFoundError(f"Product {product_id} not found") from e
        raise

    return response['Attributes']


FIELD_RESOLVERS = {
    'getProductById': get_product_by_id,
    'listProducts': list_products,
    'productsByCategory': products_by_category,
    'createProduct': create_product,
    'deleteProduct': delete_product,
    'updateProduct': update_product,
}


def to_dynamodb(value: Any) -> Any:
    """Convert floats to Decimal, which boto3 requires for numbers"""
    return json.loads(json.dumps(value), parse_float=Decimal)


def to_graphql(value: Any) -> Any:
    """Convert DynamoDB Decimals back to int/float so the result serializes"""
    if isinstance(value, list):
        return [to_graphql(item) for item in value]
    if isinstance(value, dict):
        return {key: to_graphql(item) for key, item in value.items()}
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _require(arguments: Dict[str, Any], name: str) -> Any:
    value = arguments.get(name)
    if value is None or value == '':
        raise ValueError(f"Missing required argument: {name}")
    return value
