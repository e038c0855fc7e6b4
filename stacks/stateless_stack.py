"""CDK stack for the order API: Lambda handlers behind API Gateway."""

import os
from typing import Dict, Optional

import aws_cdk as cdk
from constructs import Construct
from aws_cdk import (
    aws_apigateway as apigw,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cloudwatch_actions,
    aws_dynamodb as dynamodb,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
    aws_sns as sns,
    aws_sns_subscriptions as subscriptions,
    Duration,
    RemovalPolicy,
    CfnOutput,
)

LAMBDAS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "lambdas")

# Lambda configuration constants
DEFAULT_MEMORY_MB = 128
FUNCTION_TIMEOUT_SECONDS = 30

# Logging configuration
LOG_RETENTION_DAYS = logs.RetentionDays.TWO_WEEKS

# Stages that get alarms on the API
MONITORED_STAGES = ("staging", "prod")
API_5XX_ALARM_THRESHOLD = 1

CORS_METHODS = ["OPTIONS", "POST", "GET"]


class StatelessStack(cdk.Stack):
    """Stack for the order handlers and the REST API in front of them."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        orders_table: dynamodb.ITable,
        invoices_bucket: s3.IBucket,
        stage_name: str,
        lambda_memory_size: int = DEFAULT_MEMORY_MB,
        notification_email: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Initialise the stateless stack.

        Args:
            scope: The scope in which this stack is defined.
            construct_id: The scoped construct ID.
            orders_table: Table shared by orders and stores.
            invoices_bucket: Bucket the create handler writes invoices to.
            stage_name: Deployment stage, used as the API stage name.
            lambda_memory_size: Memory for every handler, in MB.
            notification_email: Optional address subscribed to API alarms.
            **kwargs: Additional stack properties.
        """
        super().__init__(scope, construct_id, **kwargs)

        resource_suffix = self.node.try_get_context("resource_suffix") or ""
        self._name_suffix = f"-{resource_suffix}" if resource_suffix else ""
        self._memory_size = lambda_memory_size

        table_env = {"TABLE_NAME": orders_table.table_name}

        self.create_order_function = self._create_function(
            "CreateOrder",
            "create-order",
            "create_order.handler",
            {**table_env, "BUCKET_NAME": invoices_bucket.bucket_name},
        )
        self.get_order_function = self._create_function(
            "GetOrder", "get-order", "get_order.handler", table_env
        )
        self.list_orders_function = self._create_function(
            "ListOrders", "list-orders", "list_orders.handler", table_env
        )
        self.health_check_function = self._create_function(
            "HealthCheck", "health-check", "health_check.handler", {}
        )

        # Create reads stores and writes orders; the rest only read
        orders_table.grant_read_write_data(self.create_order_function)
        orders_table.grant_read_data(self.get_order_function)
        orders_table.grant_read_data(self.list_orders_function)
        invoices_bucket.grant_write(self.create_order_function)

        self.orders_api = apigw.RestApi(
            self,
            "Api",
            rest_api_name=f"serverless-orders-api{self._name_suffix}",
            description=f"Serverless Orders API {stage_name}",
            deploy=True,
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_credentials=True,
                allow_methods=CORS_METHODS,
                allow_headers=["*"],
            ),
            endpoint_types=[apigw.EndpointType.REGIONAL],
            cloud_watch_role=True,
            deploy_options=apigw.StageOptions(
                stage_name=stage_name,
                logging_level=apigw.MethodLoggingLevel.INFO,
            ),
        )

        orders = self.orders_api.root.add_resource("orders")
        order = orders.add_resource("{id}")
        health_check = self.orders_api.root.add_resource("health-checks")

        orders.add_method(
            "POST",
            apigw.LambdaIntegration(self.create_order_function, proxy=True),
        )
        orders.add_method(
            "GET",
            apigw.LambdaIntegration(self.list_orders_function, proxy=True),
        )
        order.add_method(
            "GET",
            apigw.LambdaIntegration(self.get_order_function, proxy=True),
        )
        health_check.add_method(
            "GET",
            apigw.LambdaIntegration(self.health_check_function, proxy=True),
        )

        if stage_name in MONITORED_STAGES:
            self._add_api_alarm(stage_name, notification_email)

        CfnOutput(
            self,
            "ApiEndpointUrl",
            value=self.orders_api.url,
            description="Base URL of the Orders API",
        )

        CfnOutput(
            self,
            "HealthCheckUrl",
            value=self.orders_api.url_for_path("/health-checks"),
            description="URL of the health check endpoint",
        )

        CfnOutput(
            self,
            "CreateOrderFunctionName",
            value=self.create_order_function.function_name,
            description="Name of the CreateOrder Lambda function",
        )

        CfnOutput(
            self,
            "GetOrderFunctionName",
            value=self.get_order_function.function_name,
            description="Name of the GetOrder Lambda function",
        )

        CfnOutput(
            self,
            "ListOrdersFunctionName",
            value=self.list_orders_function.function_name,
            description="Name of the ListOrders Lambda function",
        )

        CfnOutput(
            self,
            "HealthCheckFunctionName",
            value=self.health_check_function.function_name,
            description="Name of the HealthCheck Lambda function",
        )

    def _create_function(
        self,
        construct_id: str,
        name: str,
        handler: str,
        environment: Dict[str, str],
    ) -> lambda_.Function:
        """Create a handler function with its own log group."""
        function_name = f"serverless-orders-{name}{self._name_suffix}"

        log_group = logs.LogGroup(
            self,
            f"{construct_id}LogGroup",
            log_group_name=f"/aws/lambda/{function_name}",
            retention=LOG_RETENTION_DAYS,
            removal_policy=RemovalPolicy.DESTROY,
        )

        return lambda_.Function(
            self,
            f"{construct_id}Function",
            function_name=function_name,
            runtime=lambda_.Runtime.PYTHON_3_12,
            architecture=lambda_.Architecture.ARM_64,
            handler=handler,
            code=lambda_.Code.from_asset(LAMBDAS_DIR),
            environment=environment,
            timeout=Duration.seconds(FUNCTION_TIMEOUT_SECONDS),
            memory_size=self._memory_size,
            log_group=log_group,
        )

    def _add_api_alarm(self, stage_name: str, notification_email: Optional[str]) -> None:
        """Alarm on API server errors and notify an SNS topic."""
        self.alarm_topic = sns.Topic(
            self,
            "ApiAlarmTopic",
            topic_name=f"{stage_name}-orders-api-alarms{self._name_suffix}",
            display_name=f"{stage_name} Orders API Alarms",
        )
        self.alarm_topic.apply_removal_policy(RemovalPolicy.DESTROY)

        if notification_email:
            self.alarm_topic.add_subscription(
                subscriptions.EmailSubscription(notification_email)
            )

        api_alarm = cloudwatch.Alarm(
            self,
            "ApiServerErrorAlarm",
            alarm_name=f"{stage_name}-orders-api-5xx{self._name_suffix}",
            alarm_description=f"{stage_name} Orders API 5XX errors",
            metric=self.orders_api.metric_server_error(period=Duration.minutes(5)),
            threshold=API_5XX_ALARM_THRESHOLD,
            evaluation_periods=1,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING,
        )
        api_alarm.add_alarm_action(cloudwatch_actions.SnsAction(self.alarm_topic))
        api_alarm.apply_removal_policy(RemovalPolicy.DESTROY)
