"""
Pytest configuration and fixtures for the Multi-auth E-commerce API tests
Synthesizes the CDK stack and mocks DynamoDB for the resolver
"""
import os
import sys
import pytest
import boto3
from pathlib import Path
from moto import mock_aws

# Set resolver environment variables BEFORE any imports
# The handler reads them when its module is imported
os.environ.setdefault('PRODUCT_TABLE', 'test-product-table')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')
os.environ.setdefault('AWS_ACCESS_KEY_ID', 'testing')
os.environ.setdefault('AWS_SECRET_ACCESS_KEY', 'testing')

# Add infrastructure and Lambda directories to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src" / "lambda_functions" / "product_handler"))
sys.path.insert(0, str(project_root / "infrastructure"))
sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks fast tests with no AWS access"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (may be slow)"
    )


@pytest.fixture(scope="session")
def stack():
    """E-commerce API stack synthesized with default configuration"""
    import aws_cdk as cdk
    from stacks.ecommerce_api_stack import EcommerceApiStack

    app = cdk.App()
    return EcommerceApiStack(app, "EcommerceApiStack-test")


@pytest.fixture(scope="session")
def template(stack):
    """CloudFormation template of the synthesized stack"""
    from aws_cdk.assertions import Template

    return Template.from_stack(stack)


@pytest.fixture
def product_table():
    """Mocked DynamoDB product table with the category index"""
    import handler

    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        table = dynamodb.create_table(
            TableName=os.environ['PRODUCT_TABLE'],
            KeySchema=[{'AttributeName': 'id', 'KeyType': 'HASH'}],
            AttributeDefinitions=[
                {'AttributeName': 'id', 'AttributeType': 'S'},
                {'AttributeName': 'category', 'AttributeType': 'S'}
            ],
            GlobalSecondaryIndexes=[{
                'IndexName': 'productsByCategory',
                'KeySchema': [{'AttributeName': 'category', 'KeyType': 'HASH'}],
                'Projection': {'ProjectionType': 'ALL'},
                'ProvisionedThroughput': {'ReadCapacityUnits': 5, 'WriteCapacityUnits': 5}
            }],
            ProvisionedThroughput={'ReadCapacityUnits': 5, 'WriteCapacityUnits': 5}
        )

        # Handler caches its table; point it at the mocked one
        handler._table = None
        yield table
        handler._table = None


def appsync_event(field_name, arguments=None, parent_type='Query'):
    """Build an AppSync direct Lambda resolver event"""
    return {
        'arguments': arguments or {},
        'identity': None,
        'source': None,
        'info': {
            'fieldName': field_name,
            'parentTypeName': parent_type,
            'variables': {},
            'selectionSetList': ['id', 'name', 'category']
        }
    }
