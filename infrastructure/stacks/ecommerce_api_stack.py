"""
E-commerce API Stack
AppSync GraphQL API with API key and Cognito authorization, resolved by a
single Lambda function that reads and writes a DynamoDB product table
"""
from pathlib import Path
from typing import Optional

from aws_cdk import (
    Stack,
    aws_appsync as appsync,
    aws_cognito as cognito,
    aws_dynamodb as dynamodb,
    aws_lambda as _lambda,
    CfnOutput,
    Duration,
    Expiration
)
from constructs import Construct

from stacks.config import StackConfig


PROJECT_ROOT = Path(__file__).resolve().parents[2]
SCHEMA_PATH = PROJECT_ROOT / "graphql" / "schema.graphql"
PRODUCT_HANDLER_PATH = PROJECT_ROOT / "src" / "lambda_functions" / "product_handler"

PRODUCT_TABLE_ENV_VAR = "PRODUCT_TABLE"
CATEGORY_INDEX_NAME = "productsByCategory"

# GraphQL fields resolved by the product handler, as (type name, field name)
PRODUCT_OPERATIONS = (
    ("Query", "getProductById"),
    ("Query", "listProducts"),
    ("Query", "productsByCategory"),
    ("Mutation", "createProduct"),
    ("Mutation", "deleteProduct"),
    ("Mutation", "updateProduct"),
)


class EcommerceApiStack(Stack):
    """
    Product catalogue API stack.

    Readers authenticate with the API key; signed-in Cognito users can
    also run the mutations.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[StackConfig] = None,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config or StackConfig()

        # Cognito User Pool with email sign-up and verification
        self.user_pool = cognito.UserPool(
            self,
            "ecom-apiuserpool",
            self_sign_up_enabled=True,
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            auto_verify=cognito.AutoVerifiedAttrs(email=True),
            standard_attributes=cognito.StandardAttributes(
                email=cognito.StandardAttribute(required=True, mutable=True)
            ),
            removal_policy=self.config.removal_policy
        )

        self.user_pool_client = cognito.UserPoolClient(
            self,
            "UserPoolClient",
            user_pool=self.user_pool
        )

        # GraphQL API: API key by default, Cognito as the additional mode
        self.api = appsync.GraphqlApi(
            self,
            "graphqlAPI",
            name=self.config.api_name,
            definition=appsync.Definition.from_file(str(SCHEMA_PATH)),
            authorization_config=appsync.AuthorizationConfig(
                default_authorization=appsync.AuthorizationMode(
                    authorization_type=appsync.AuthorizationType.API_KEY,
                    api_key_config=appsync.ApiKeyConfig(
                        expires=Expiration.after(
                            Duration.days(self.config.api_key_expiry_days)
                        )
                    )
                ),
                additional_authorization_modes=[
                    appsync.AuthorizationMode(
                        authorization_type=appsync.AuthorizationType.USER_POOL,
                        user_pool_config=appsync.UserPoolConfig(
                            user_pool=self.user_pool
                        )
                    )
                ]
            ),
            log_config=appsync.LogConfig(
                field_log_level=(
                    appsync.FieldLogLevel.ALL
                    if self.config.is_development()
                    else appsync.FieldLogLevel.ERROR
                )
            )
        )

        # Resolver function
        self.product_handler = _lambda.Function(
            self,
            "AppSyncProductHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handler.lambda_handler",
            code=_lambda.Code.from_asset(str(PRODUCT_HANDLER_PATH)),
            memory_size=self.config.handler_memory_size,
            timeout=Duration.seconds(self.config.handler_timeout_seconds),
            environment={
                "LOG_LEVEL": self.config.log_level
            },
            description="Resolves product queries and mutations for the GraphQL API"
        )

        # The function is the data source for every product field
        self.lambda_data_source = self.api.add_lambda_data_source(
            "lambdaDatasource",
            self.product_handler
        )

        self.resolvers = [
            self.lambda_data_source.create_resolver(
                f"{type_name}{field_name}Resolver",
                type_name=type_name,
                field_name=field_name
            )
            for type_name, field_name in PRODUCT_OPERATIONS
        ]

        self.product_table = dynamodb.Table(
            self,
            "CDKProductTable",
            partition_key=dynamodb.Attribute(
                name="id",
                type=dynamodb.AttributeType.STRING
            ),
            removal_policy=self.config.removal_policy
        )

        # Lookup by category
        self.product_table.add_global_secondary_index(
            index_name=CATEGORY_INDEX_NAME,
            partition_key=dynamodb.Attribute(
                name="category",
                type=dynamodb.AttributeType.STRING
            )
        )

        self.product_table.grant_full_access(self.product_handler)

        # Table name is a token until deploy time
        self.product_handler.add_environment(
            PRODUCT_TABLE_ENV_VAR,
            self.product_table.table_name
        )

        # CloudFormation Outputs
        CfnOutput(
            self,
            "GraphQLAPIURL",
            value=self.api.graphql_url,
            description="AppSync GraphQL endpoint URL"
        )

        CfnOutput(
            self,
            "AppSyncAPIKey",
            value=self.api.api_key or "",
            description="AppSync API key"
        )

        CfnOutput(
            self,
            "ProjectRegion",
            value=self.region,
            description="Deployment region"
        )

        CfnOutput(
            self,
            "UserPoolId",
            value=self.user_pool.user_pool_id,
            description="Cognito User Pool ID"
        )

        CfnOutput(
            self,
            "UserPoolClientId",
            value=self.user_pool_client.user_pool_client_id,
            description="Cognito User Pool Client ID"
        )
