"""
Research job that grows the dataset.

Responsibilities:
- Read the user request handed over by the automation runner.
- Build a prompt and ask the Groq LLM for new gluten-free friendly restaurants.
- Validate and deduplicate the returned records.
- Append them to the dataset in a single rewrite.
"""
