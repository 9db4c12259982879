"""Scrivener output routing — severity subscriptions, sinks and syslog.

The SinkRegistry maps every severity to the ordered sinks subscribed to
it.  Sinks are either caller-owned streams or engine-owned files; the
SyslogAdapter forwards records to the platform system log when enabled.
"""
