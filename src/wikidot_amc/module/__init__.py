"""Domain objects built on top of the AMC pipeline."""
