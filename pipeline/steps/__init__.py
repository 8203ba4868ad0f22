"""Pipeline steps package.

This package contains all the individual steps in the compose pipeline:
- field_validator: Validates form fields and builds the ComposeRequest
- rate_limiter: Sliding-window admission control per caller
- injection_guard: Blocks or sanitizes prompt-injection attempts
- prompt_builder: Renders the compose or fix prompt
- provider_gateway: Calls the chat-completions provider
"""
