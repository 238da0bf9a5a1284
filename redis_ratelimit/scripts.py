"""Lua sources for the server-side check-and-update procedure.

Both variants read ``KEYS[1]`` as the access log and ``ARGV`` as
``window, limit, now``. They reply ``OK`` on admission or the remaining wait
as decimal text on rejection. The only difference is the expiry command, so a
key must always be driven by the same variant.
"""

from __future__ import annotations

from typing import Final

from .clock import TimeUnit

ADMITTED: Final[str] = "OK"

_SCRIPT_TEMPLATE: Final[str] = """
local key = KEYS[1]
local window = tonumber(ARGV[1])
local limit = tonumber(ARGV[2])
local now = ARGV[3]

if redis.call('LLEN', key) >= limit then
    local age = tonumber(now) - tonumber(redis.call('LINDEX', key, 0))
    if age < window then
        return string.format('%d', window - age)
    end
    redis.call('LPOP', key)
end
redis.call('RPUSH', key, now)
redis.call('<expire>', key, window)
return 'OK'
"""

SECONDS_SCRIPT: Final[str] = _SCRIPT_TEMPLATE.replace("<expire>", "EXPIRE")
MILLISECONDS_SCRIPT: Final[str] = _SCRIPT_TEMPLATE.replace("<expire>", "PEXPIRE")

SCRIPTS: Final[dict[TimeUnit, str]] = {
    TimeUnit.seconds: SECONDS_SCRIPT,
    TimeUnit.milliseconds: MILLISECONDS_SCRIPT,
}
