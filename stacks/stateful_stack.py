"""CDK stack for the order data: the shared table and the invoice bucket."""

from typing import Optional

import aws_cdk as cdk
from constructs import Construct
from aws_cdk import (
    aws_dynamodb as dynamodb,
    aws_s3 as s3,
    RemovalPolicy,
    CfnOutput,
)

# Index used to query records by their type (e.g. all stores)
STORE_INDEX_NAME = "storeIndex"


class StatefulStack(cdk.Stack):
    """Stack holding the resources whose data outlives a deployment."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        invoice_bucket_name: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Initialise the stateful stack.

        Args:
            scope: The scope in which this stack is defined.
            construct_id: The scoped construct ID.
            invoice_bucket_name: Optional physical name for the invoice bucket.
            **kwargs: Additional stack properties.
        """
        super().__init__(scope, construct_id, **kwargs)

        resource_suffix = self.node.try_get_context("resource_suffix") or ""
        name_suffix = f"-{resource_suffix}" if resource_suffix else ""

        # Orders and stores share one table, told apart by "type"
        self.orders_table = dynamodb.Table(
            self,
            "OrdersTable",
            table_name=f"serverless-orders{name_suffix}",
            partition_key=dynamodb.Attribute(
                name="id",
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            encryption=dynamodb.TableEncryption.AWS_MANAGED,
            point_in_time_recovery_specification=dynamodb.PointInTimeRecoverySpecification(
                point_in_time_recovery_enabled=True
            ),
            removal_policy=RemovalPolicy.DESTROY,
        )

        self.orders_table.add_global_secondary_index(
            index_name=STORE_INDEX_NAME,
            partition_key=dynamodb.Attribute(
                name="type",
                type=dynamodb.AttributeType.STRING,
            ),
            projection_type=dynamodb.ProjectionType.ALL,
        )

        # Bucket receiving one invoice object per order
        self.invoices_bucket = s3.Bucket(
            self,
            "InvoicesBucket",
            bucket_name=invoice_bucket_name,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
        )

        CfnOutput(
            self,
            "OrdersTableName",
            value=self.orders_table.table_name,
            description="Name of the Orders DynamoDB table",
        )

        CfnOutput(
            self,
            "OrdersTableArn",
            value=self.orders_table.table_arn,
            description="ARN of the Orders DynamoDB table",
        )

        CfnOutput(
            self,
            "InvoicesBucketName",
            value=self.invoices_bucket.bucket_name,
            description="Name of the invoice S3 bucket",
        )
