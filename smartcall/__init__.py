"""SmartCall — LLM tool-dispatch server."""
