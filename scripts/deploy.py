#!/usr/bin/env python3
"""
Deployment script for the Multi-auth E-commerce API
Deploys the CDK stack and writes a client configuration from its outputs
"""
import argparse
import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Optional


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Stack outputs the client configuration is built from
REQUIRED_OUTPUTS = (
    "GraphQLAPIURL",
    "AppSyncAPIKey",
    "ProjectRegion",
    "UserPoolId",
    "UserPoolClientId",
)


def build_client_config(stack_outputs: Dict[str, str]) -> Dict[str, Any]:
    """Map the stack outputs onto an Amplify-style client configuration"""
    missing = [name for name in REQUIRED_OUTPUTS if name not in stack_outputs]
    if missing:
        raise KeyError(f"Stack outputs missing: {', '.join(missing)}")

    return {
        "aws_project_region": stack_outputs["ProjectRegion"],
        "aws_appsync_graphqlEndpoint": stack_outputs["GraphQLAPIURL"],
        "aws_appsync_region": stack_outputs["ProjectRegion"],
        "aws_appsync_authenticationType": "API_KEY",
        "aws_appsync_apiKey": stack_outputs["AppSyncAPIKey"],
        "aws_user_pools_id": stack_outputs["UserPoolId"],
        "aws_user_pools_web_client_id": stack_outputs["UserPoolClientId"],
    }


class EcommerceApiDeployer:
    """Handles deployment of the E-commerce API stack"""

    def __init__(self, environment: str, region: str = "us-east-1", account: Optional[str] = None):
        self.environment = environment
        self.region = region
        self.account = account
        self.stack_name = f"EcommerceApiStack-{environment}"
        self.outputs_file = PROJECT_ROOT / "cdk-outputs.json"

    def _context_args(self) -> list:
        args = [
            "--context", f"environment={self.environment}",
            "--context", f"region={self.region}"
        ]
        if self.account:
            args.extend(["--context", f"account={self.account}"])
        return args

    def check_prerequisites(self) -> bool:
        """Check AWS credentials and the CDK toolkit"""
        try:
            result = subprocess.run(
                ["aws", "sts", "get-caller-identity"],
                capture_output=True, text=True, check=True
            )
            identity = json.loads(result.stdout)
            print(f"✅ AWS credentials configured for: {identity.get('Arn', 'Unknown')}")
        except subprocess.CalledProcessError:
            print("❌ AWS credentials not configured. Run 'aws configure' first.")
            return False
        except FileNotFoundError:
            print("❌ AWS CLI not installed. Install it first.")
            return False

        try:
            result = subprocess.run(["cdk", "--version"], capture_output=True, text=True, check=True)
            print(f"✅ CDK installed: {result.stdout.strip()}")
        except (subprocess.CalledProcessError, FileNotFoundError):
            print("❌ CDK not installed. Run 'npm install -g aws-cdk' first.")
            return False

        return True

    def deploy_stack(self) -> bool:
        """Deploy the stack and record its outputs"""
        print(f"📦 Deploying {self.stack_name}...")

        cmd = [
            "cdk", "deploy", self.stack_name,
            "--require-approval", "never",
            "--outputs-file", str(self.outputs_file)
        ] + self._context_args()

        result = subprocess.run(cmd, capture_output=True, text=True, cwd=PROJECT_ROOT)

        if result.returncode != 0:
            print(f"❌ Failed to deploy {self.stack_name}:")
            print(result.stderr)
            return False

        print(f"✅ {self.stack_name} deployed successfully!")
        return True

    def get_stack_outputs(self) -> Dict[str, str]:
        """Read this stack's outputs from the toolkit's outputs file"""
        if not self.outputs_file.exists():
            return {}

        with open(self.outputs_file, "r") as f:
            outputs = json.load(f)

        return outputs.get(self.stack_name, {})

    def write_client_config(self, config_path: Path) -> bool:
        """Write the client configuration built from the stack outputs"""
        try:
            client_config = build_client_config(self.get_stack_outputs())
        except KeyError as e:
            print(f"❌ Cannot build client configuration: {e}")
            return False

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(client_config, f, indent=2)

        print(f"✅ Client configuration written to {config_path}")
        print(f"   GraphQL endpoint: {client_config['aws_appsync_graphqlEndpoint']}")
        print(f"   Cognito User Pool: {client_config['aws_user_pools_id']}")
        return True


def main(argv=None) -> int:
    """Main deployment script entry point"""
    parser = argparse.ArgumentParser(description="Deploy the Multi-auth E-commerce API")
    parser.add_argument(
        "environment",
        choices=["development", "staging", "production"],
        help="Target environment"
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_REGION", "us-east-1"),
        help="AWS region"
    )
    parser.add_argument(
        "--account",
        help="AWS account ID (optional)"
    )
    parser.add_argument(
        "--skip-deploy",
        action="store_true",
        help="Only write the client configuration from an existing outputs file"
    )
    parser.add_argument(
        "--config-out",
        default=str(PROJECT_ROOT / "client-config.json"),
        help="Where to write the client configuration"
    )

    args = parser.parse_args(argv)

    deployer = EcommerceApiDeployer(
        environment=args.environment,
        region=args.region,
        account=args.account
    )

    if not args.skip_deploy:
        if not deployer.check_prerequisites() or not deployer.deploy_stack():
            print(f"\n💥 Deployment to {args.environment} failed!")
            return 1

    if not deployer.write_client_config(Path(args.config_out)):
        return 1

    print(f"\n🎉 Deployment to {args.environment} completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
