"""领域层模型与协议。

包含：
- models: Message / Theme / SessionConfig。
- persistence: KeyValueStore 协议与 PersistenceAdapter。
- conversation: ConversationStore 及历史的序列化。
- exceptions: 业务异常类型定义。
"""
