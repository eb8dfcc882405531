"""CDK stacks for the backend API infrastructure."""
