"""Minimal command-line demonstration of the chat client (no GUI)."""

from chat_core import run_chat

if __name__ == "__main__":
    question = "RAG とは何ですか？三行で説明してください。"
    result = run_chat(question)
    print("User:", question)
    print("AI:", result["reply"] or result["outcome"])
