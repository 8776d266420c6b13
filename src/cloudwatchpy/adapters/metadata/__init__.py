"""Metadata source adapters."""

from cloudwatchpy.adapters.metadata.ec2 import EC2MetadataSource, ec2_instance_id_adder

__all__ = ["EC2MetadataSource", "ec2_instance_id_adder"]
