"""Tests for sample and help text synthesis"""
from collectors.cloudwatch.samples import SampleSynthesizer, base_name
from metrics.rules import MetricRule
from conftest import datapoint, dims


class TestBaseName:
    """Test exported metric name prefixes"""

    def test_elb(self, elb_rule):
        assert base_name(elb_rule) == "aws_elb_request_count"

    def test_acronym_metric(self):
        rule = MetricRule(aws_namespace="AWS/EC2", aws_metric_name="CPUUtilization")

        assert base_name(rule) == "aws_ec2_cpu_utilization"

    def test_dynamodb_index_metric(self):
        rule = MetricRule(
            aws_namespace="AWS/DynamoDB",
            aws_metric_name="ConsumedReadCapacityUnits",
            aws_dimensions=["TableName", "GlobalSecondaryIndexName"],
        )

        assert base_name(rule) == "aws_dynamodb_consumed_read_capacity_units_index"

    def test_dynamodb_table_metric(self):
        rule = MetricRule(
            aws_namespace="AWS/DynamoDB",
            aws_metric_name="ConsumedReadCapacityUnits",
            aws_dimensions=["TableName"],
        )

        assert base_name(rule) == "aws_dynamodb_consumed_read_capacity_units"

    def test_dynamodb_other_metric_with_index(self):
        rule = MetricRule(
            aws_namespace="AWS/DynamoDB",
            aws_metric_name="SuccessfulRequestLatency",
            aws_dimensions=["TableName", "GlobalSecondaryIndexName"],
        )

        assert base_name(rule) == "aws_dynamodb_successful_request_latency"


class TestSampleSynthesizer:
    """Test sample generation"""

    def setup_method(self):
        self.synthesizer = SampleSynthesizer()

    def test_base_statistics(self, elb_rule):
        combination = dims(("AvailabilityZone", "eu-west-1a"), ("LoadBalancerName", "myLB"))
        dp = datapoint(sum=10.0, sample_count=5.0, minimum=1.0, maximum=4.0, average=2.0)

        samples = self.synthesizer.synthesize(elb_rule, combination, dp)

        assert [statistic for statistic, _ in samples] == ["Sum", "SampleCount", "Minimum", "Maximum", "Average"]
        assert [s.name for _, s in samples] == [
            "aws_elb_request_count_sum",
            "aws_elb_request_count_sample_count",
            "aws_elb_request_count_minimum",
            "aws_elb_request_count_maximum",
            "aws_elb_request_count_average",
        ]
        assert [s.value for _, s in samples] == [10.0, 5.0, 1.0, 4.0, 2.0]

    def test_labels(self, elb_rule):
        combination = dims(("AvailabilityZone", "eu-west-1a"), ("LoadBalancerName", "myLB"))

        _, sample = self.synthesizer.synthesize(elb_rule, combination, datapoint(sum=1.0))[0]

        assert sample.label_names == ["job", "instance", "availability_zone", "load_balancer_name"]
        assert sample.label_values == ["aws_elb", "", "eu-west-1a", "myLB"]

    def test_absent_statistics_skipped(self, elb_rule):
        samples = self.synthesizer.synthesize(elb_rule, (), datapoint(maximum=7.0))

        assert len(samples) == 1
        assert samples[0][1].name == "aws_elb_request_count_maximum"

    def test_zero_value_kept(self, elb_rule):
        samples = self.synthesizer.synthesize(elb_rule, (), datapoint(sum=0.0))

        assert samples[0][1].value == 0.0

    def test_extended_statistic(self):
        rule = MetricRule(
            aws_namespace="AWS/ELB",
            aws_metric_name="Latency",
            aws_dimensions=["LoadBalancerName"],
            aws_extended_statistics=["p99"],
        )
        combination = dims(("LoadBalancerName", "myLB"))

        samples = self.synthesizer.synthesize(rule, combination, datapoint(extended_statistics={"p99": 12.3}))

        assert len(samples) == 1
        statistic, sample = samples[0]
        assert statistic == "p99"
        assert sample.name == "aws_elb_latency_p99"
        assert sample.value == 12.3
        assert sample.labels == {"job": "aws_elb", "instance": "", "load_balancer_name": "myLB"}

    def test_extended_statistic_name_normalised(self):
        rule = MetricRule(aws_namespace="AWS/ELB", aws_metric_name="Latency", aws_extended_statistics=["p99.9"])

        samples = self.synthesizer.synthesize(rule, (), datapoint(extended_statistics={"p99.9": 1.5}))

        assert samples[0][1].name == "aws_elb_latency_p99_9"


class TestHelpText:
    """Test help text generation"""

    def setup_method(self):
        self.synthesizer = SampleSynthesizer()

    def test_generated(self, elb_rule):
        assert self.synthesizer.help_text(elb_rule, "Sum", "Count") == (
            "AWS/ELB RequestCount Dimensions: [AvailabilityZone, LoadBalancerName] "
            "Statistic: Sum Unit: Count"
        )

    def test_custom(self):
        rule = MetricRule(aws_namespace="AWS/ELB", aws_metric_name="RequestCount", help="Requests")

        assert self.synthesizer.help_text(rule, "Sum", "Count") == "Requests"

    def test_missing_unit(self):
        rule = MetricRule(aws_namespace="AWS/S3", aws_metric_name="BucketSizeBytes")

        assert self.synthesizer.help_text(rule, "Average", None) == (
            "AWS/S3 BucketSizeBytes Dimensions: [] Statistic: Average Unit: None"
        )
