"""
Centralized prompts.

Workflow and client code import prompts from here; nothing else hardcodes
model instructions.
"""


DOCUMENT_QA_SYSTEM_PROMPT = """
You are a helpful assistant that answers questions about a document the user
uploaded.

RULES:

1. Use the provided document context as your source of truth.
2. You MAY combine information from several context sections.
3. Use the previous conversation only to understand what the user is asking.
4. If the answer is not in the context, say that the document does not
   contain it. Do not make up an answer.

Answer clearly and concisely.
""".strip()


SUMMARY_QUESTION = (
    "Please provide a comprehensive summary of this document. "
    "Include the main points and key takeaways."
)


CONDENSE_QUESTION_PROMPT = """
Given the following conversation and a follow up question, rephrase the follow up question to be a standalone question that captures all relevant context from the conversation.

Chat History:
{chat_history}

Follow Up Input: {question}

Standalone question:
""".strip()
