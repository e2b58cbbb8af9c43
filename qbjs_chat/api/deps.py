# Role: Process-wide dependencies for the HTTP layer. One ChatFlow (corpus, index cache, transcripts) per process.

from qbjs_chat.core.chat_flow import ChatFlow

chat_flow = ChatFlow()
