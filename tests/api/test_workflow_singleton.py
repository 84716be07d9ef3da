import threading
import time
from unittest.mock import MagicMock, patch

import granacred.api.routes as routes


def test_concurrent_first_requests_share_one_workflow():
    built = []

    def slow_workflow():
        time.sleep(0.05)
        wf = MagicMock()
        built.append(wf)
        return wf

    seen = []
    with patch.object(routes, "_workflow", None), \
         patch.object(routes, "Workflow", side_effect=slow_workflow):
        threads = [threading.Thread(target=lambda: seen.append(routes.get_workflow())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert len(built) == 1
    built[0].restore.assert_called_once()
    assert all(wf is built[0] for wf in seen)
