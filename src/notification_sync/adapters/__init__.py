"""Adapters – HTTP snapshot/mutation client and the STOMP push channel."""
