# summarizer/prompts/prompt_builder.py

from typing import List, Dict, Sequence

from summarizer.prompts.system_prompts import (
    CONDENSE_QUESTION_PROMPT,
    DOCUMENT_QA_SYSTEM_PROMPT,
)


def format_context(context_chunks: List[Dict]) -> str:

    return "\n\n".join(
        f"[Context {i + 1}]\n{chunk['text']}"
        for i, chunk in enumerate(context_chunks)
    )


def build_document_prompt(question: str, context_chunks: List[Dict]) -> str:

    prompt = f"""
DOCUMENT CONTEXT:
----------------
{format_context(context_chunks)}
----------------

QUESTION:
{question}

Answer using the DOCUMENT CONTEXT above.
"""

    return prompt.strip()


def build_chat_messages(
    question: str,
    context_chunks: List[Dict],
    chat_history: Sequence = (),
) -> List[Dict[str, str]]:
    """
    Chat completion messages: system prompt, prior turns in order, then the
    grounded question.

    ``chat_history`` items expose ``question`` and ``answer`` attributes.
    """

    messages = [{"role": "system", "content": DOCUMENT_QA_SYSTEM_PROMPT}]

    for turn in chat_history:
        messages.append({"role": "user", "content": turn.question})
        messages.append({"role": "assistant", "content": turn.answer})

    messages.append({
        "role": "user",
        "content": build_document_prompt(question, context_chunks),
    })

    return messages


def build_condense_messages(question: str, chat_history: Sequence) -> List[Dict[str, str]]:

    history = "\n".join(
        f"Human: {turn.question}\nAssistant: {turn.answer}"
        for turn in chat_history
    )

    return [{
        "role": "user",
        "content": CONDENSE_QUESTION_PROMPT.format(
            chat_history=history,
            question=question,
        ),
    }]
