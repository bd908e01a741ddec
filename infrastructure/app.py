#!/usr/bin/env python3
"""
AWS CDK App for the Multi-auth E-commerce API
"""
import aws_cdk as cdk
from stacks.config import StackConfig
from stacks.ecommerce_api_stack import EcommerceApiStack


app = cdk.App()

# Get environment configuration
config = StackConfig.from_context(app.node)
account = app.node.try_get_context("account")
region = app.node.try_get_context("region") or "us-east-1"

# Create environment configuration
env_config = cdk.Environment(account=account, region=region)

EcommerceApiStack(
    app,
    f"EcommerceApiStack-{config.environment}",
    config=config,
    env=env_config,
    description=f"Multi-auth E-commerce GraphQL API - {config.environment} environment"
)

app.synth()
