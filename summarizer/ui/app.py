# summarizer/ui/app.py
import os

import requests
import streamlit as st

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000")

REQUEST_TIMEOUT_SECONDS = 120

# Turns sent back to the server as conversational context
HISTORY_TURNS_SENT = 2

st.set_page_config(page_title="Document Summarizer", layout="centered")

st.title("Document Summarizer")
st.write("Upload a PDF to get a summary, then ask questions about it.")


# ============================================================
# STATE: NoDocument -> Ready(file_id)
# ============================================================

if "file_id" not in st.session_state:
    st.session_state.file_id = None
    st.session_state.summary = None
    st.session_state.messages = []
    st.session_state.busy = False
    st.session_state.error = None


def reset_document(error=None):
    st.session_state.file_id = None
    st.session_state.summary = None
    st.session_state.messages = []
    st.session_state.error = error


def error_message(response) -> str:
    try:
        return response.json().get("detail", "Unknown error")
    except ValueError:
        return f"HTTP {response.status_code}"


def chat_history():
    """Completed question/answer pairs, oldest first."""
    turns = []
    messages = st.session_state.messages
    for question, answer in zip(messages[::2], messages[1::2]):
        turns.append({"question": question["content"], "answer": answer["content"]})
    return turns[-HISTORY_TURNS_SENT:]


if st.session_state.error:
    st.error(st.session_state.error)
    st.session_state.error = None


# ============================================================
# UPLOAD / SUMMARIZE
# ============================================================

st.header("Upload Document")

uploaded_file = st.file_uploader("Choose a PDF file", type=["pdf"])

if uploaded_file:
    col1, col2 = st.columns([3, 1])

    with col1:
        st.write(f"Selected: {uploaded_file.name}")
        st.write(f"Size: {uploaded_file.size / 1024:.2f} KB")

    with col2:
        if st.button("Summarize", type="primary", use_container_width=True,
                     disabled=st.session_state.busy):
            with st.spinner("Reading and summarizing document..."):
                try:
                    files = {
                        "file": (uploaded_file.name, uploaded_file.getvalue(), "application/pdf")
                    }
                    response = requests.post(
                        f"{API_BASE}/api/summarize",
                        files=files,
                        timeout=REQUEST_TIMEOUT_SECONDS,
                    )

                    if response.status_code == 200:
                        result = response.json()
                        reset_document()
                        st.session_state.file_id = result["fileId"]
                        st.session_state.summary = result["summary"]
                    else:
                        st.session_state.error = f"Upload failed: {error_message(response)}"
                except requests.RequestException as e:
                    st.session_state.error = f"Error: {str(e)}"
            st.rerun()


# ============================================================
# SUMMARY + CHAT
# ============================================================

if st.session_state.file_id:

    st.divider()
    st.header("Summary")
    st.markdown(st.session_state.summary)

    st.divider()
    st.header("Ask a Question")

    for message in st.session_state.messages:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

    question = st.chat_input(
        "Ask something about the document",
        disabled=st.session_state.busy,
    )

    if question and question.strip():
        history = chat_history()

        # optimistic append, rolled back if the request fails
        st.session_state.messages.append({"role": "user", "content": question.strip()})
        st.session_state.busy = True

        try:
            with st.spinner("Thinking..."):
                response = requests.post(
                    f"{API_BASE}/api/chat",
                    json={
                        "message": question.strip(),
                        "fileId": st.session_state.file_id,
                        "chatHistory": history,
                    },
                    timeout=REQUEST_TIMEOUT_SECONDS,
                )

            if response.status_code == 200:
                st.session_state.messages.append(
                    {"role": "assistant", "content": response.json()["response"]}
                )
            elif response.status_code == 404:
                reset_document(f"{error_message(response)}")
            else:
                st.session_state.messages.pop()
                st.session_state.error = f"Error: {error_message(response)}"

        except requests.RequestException as e:
            st.session_state.messages.pop()
            st.session_state.error = f"Error: {str(e)}"

        finally:
            st.session_state.busy = False

        st.rerun()

else:
    st.info("Please upload a document first")

st.divider()
st.caption("Documents are kept for one hour after their last use")
