"""Contains fixtures and utility functions."""

import hmac

CALLBACK_URL = "http://localhost:3000"
HUB_URL = "https://pubsubhubbub.appspot.com/"
SECRET = "password"  # noqa: S105

CHANNEL_ID = "UCPF-oYb2-xN5FbCXy0167Gg"
TOPIC = f"https://www.youtube.com/xml/feeds/videos.xml?channel_id={CHANNEL_ID}"

# ruff: noqa: E501

ENTRY = f"""
      <entry>
        <id>yt:video:VIDEO_ID</id>
        <yt:videoId>VIDEO_ID</yt:videoId>
        <yt:channelId>{CHANNEL_ID}</yt:channelId>
        <title>Video title</title>
        <link rel="alternate" href="http://www.youtube.com/watch?v=VIDEO_ID"/>
        <author>
         <name>Channel title</name>
         <uri>http://www.youtube.com/channel/{CHANNEL_ID}</uri>
        </author>
        <published>2015-03-06T21:40:57+00:00</published>
        <updated>2015-03-09T19:05:24.552394234+00:00</updated>
      </entry>
"""

SECOND_ENTRY = ENTRY.replace("VIDEO_ID", "OTHER_VIDEO_ID")

FEED = f"""
    <feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" xmlns="http://www.w3.org/2005/Atom">
      <link rel="hub" href="https://pubsubhubbub.appspot.com"/>
      <link rel="self" href="{TOPIC}"/>
      <title>YouTube video feed</title>
      <updated>2015-04-01T19:05:24.552394234+00:00</updated>
      {{entries}}
    </feed>
"""

XML = FEED.format(entries=ENTRY)

MULTI_ENTRY_XML = FEED.format(entries=ENTRY + SECOND_ENTRY)

MULTI_LINK_XML = XML.replace(
    '<link rel="alternate" href="http://www.youtube.com/watch?v=VIDEO_ID"/>',
    '<link rel="alternate" href="http://www.youtube.com/watch?v=VIDEO_ID"/>'
    '<link rel="alternate" href="http://www.youtube.com/watch?v=OTHER"/>',
)

NO_ENTRY_XML = FEED.format(entries="")

MISSING_FIELD_XML = XML.replace("<yt:videoId>VIDEO_ID</yt:videoId>", "")

DELETED_XML = f"""
    <feed xmlns:at="http://purl.org/atompub/tombstones/1.0" xmlns="http://www.w3.org/2005/Atom">
        <at:deleted-entry ref="yt:video:VIDEO_ID" when="2024-09-09T22:34:19.642702+00:00">
          <link href="https://www.youtube.com/watch?v=VIDEO_ID" />
          <at:by>
              <name>Channel title</name>
              <uri>https://www.youtube.com/channel/{CHANNEL_ID}</uri>
          </at:by>
        </at:deleted-entry>
    </feed>
"""

# ruff: enable


def sign(body: str | bytes, *, secret: str = SECRET, algorithm: str = "sha1") -> str:
    """Create the X-Hub-Signature header the hub would send for the body."""
    if isinstance(body, str):
        body = body.encode()

    digest = hmac.new(secret.encode(), body, algorithm).hexdigest()
    return f"{algorithm}={digest}"
