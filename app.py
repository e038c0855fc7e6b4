#!/usr/bin/env python3
"""CDK app entry point for the Serverless Orders application."""

import os
import aws_cdk as cdk
from stacks.stateful_stack import StatefulStack
from stacks.stateless_stack import DEFAULT_MEMORY_MB, StatelessStack


app = cdk.App()

stage_name = app.node.try_get_context("stage") or "develop"
stack_prefix = app.node.try_get_context("stack_name") or "ServerlessOrders"

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION", "eu-west-1"),  # Default to Dublin
)

# Table and invoice bucket, kept apart so the API can be redeployed freely
stateful_stack = StatefulStack(
    app,
    f"{stack_prefix}-Stateful",
    invoice_bucket_name=app.node.try_get_context("invoice_bucket_name"),
    env=env,
    description=f"Serverless Orders - data ({stage_name})",
)

StatelessStack(
    app,
    f"{stack_prefix}-Stateless",
    orders_table=stateful_stack.orders_table,
    invoices_bucket=stateful_stack.invoices_bucket,
    stage_name=stage_name,
    lambda_memory_size=int(
        app.node.try_get_context("lambda_memory_size") or DEFAULT_MEMORY_MB
    ),
    notification_email=app.node.try_get_context("notification_email"),
    env=env,
    description=f"Serverless Orders - API and handlers ({stage_name})",
)

app.synth()
