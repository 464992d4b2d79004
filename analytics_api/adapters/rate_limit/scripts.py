"""Redis Lua scripts for the store-backed limiters.

Each script performs the whole read-check-write sequence of one admission
inside Redis, so concurrent requests from the same client can no longer both
read the same token count and both decrement it.

Instants are epoch milliseconds passed in by the caller. A TTL of 0 means
per-client keys never expire.
"""

# KEYS: remaining tokens counter, timestamp log (most recent first)
# ARGV: capacity, window_ms, now_ms, ttl_ms
# Returns {allowed, remaining, fast_path, oldest_ts}
SLIDING_LOG_SCRIPT = """
local tokens_key = KEYS[1]
local log_key = KEYS[2]
local capacity = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])

local function touch()
    if ttl > 0 then
        redis.call('PEXPIRE', tokens_key, ttl)
        redis.call('PEXPIRE', log_key, ttl)
    end
end

local tokens = tonumber(redis.call('GET', tokens_key)) or capacity

if tokens - 1 >= 0 then
    redis.call('SETNX', tokens_key, tokens)
    local remaining = redis.call('DECR', tokens_key)
    redis.call('LPUSH', log_key, now)
    redis.call('LTRIM', log_key, 0, capacity - 1)
    touch()
    local oldest = tonumber(redis.call('LINDEX', log_key, -1)) or now
    return {1, remaining, 1, oldest}
end

-- Out of tokens: count the log entries still inside the trailing window.
local entries = redis.call('LRANGE', log_key, 0, capacity)
local kept = {}
for _, raw in ipairs(entries) do
    local ts = tonumber(raw)
    if ts and now - ts < window then
        kept[#kept + 1] = ts
    end
end

local oldest = kept[#kept] or now
local remaining = capacity - #kept - 1
if remaining < 0 then
    return {0, 0, 0, oldest}
end

redis.call('DEL', log_key)
redis.call('RPUSH', log_key, now)
for _, ts in ipairs(kept) do
    redis.call('RPUSH', log_key, ts)
end
redis.call('SET', tokens_key, remaining)
touch()
return {1, remaining, 0, oldest}
"""

# KEYS: remaining tokens counter, window start instant
# ARGV: capacity, window_ms, now_ms, ttl_ms
# Returns {allowed, remaining, window_start}
FIXED_WINDOW_SCRIPT = """
local tokens_key = KEYS[1]
local start_key = KEYS[2]
local capacity = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])

local function touch()
    if ttl > 0 then
        redis.call('PEXPIRE', tokens_key, ttl)
        redis.call('PEXPIRE', start_key, ttl)
    end
end

local tokens = tonumber(redis.call('GET', tokens_key)) or capacity

if tokens - 1 >= 0 then
    redis.call('SETNX', tokens_key, tokens)
    local remaining = redis.call('DECR', tokens_key)
    redis.call('SETNX', start_key, now)
    touch()
    local start = tonumber(redis.call('GET', start_key)) or now
    return {1, remaining, start}
end

local start = tonumber(redis.call('GET', start_key)) or 0
if now - start > window then
    redis.call('SET', tokens_key, capacity - 1)
    redis.call('SET', start_key, now)
    touch()
    return {1, capacity - 1, now}
end

return {0, 0, start}
"""
