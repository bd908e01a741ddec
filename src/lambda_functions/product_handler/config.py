"""
Configuration for the product resolver
Values are injected as environment variables by the E-commerce API stack
"""
import os


def get_env_var(key: str, default: str = None, required: bool = False) -> str:
    """Get environment variable with optional default and required validation"""
    value = os.environ.get(key, default)

    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set")

    return value


def get_table_name() -> str:
    """Name of the DynamoDB product table"""
    return get_env_var('PRODUCT_TABLE', required=True)


def get_category_index_name() -> str:
    return get_env_var('CATEGORY_INDEX_NAME', 'productsByCategory')


def get_log_level() -> str:
    return get_env_var('LOG_LEVEL', 'INFO').upper()
