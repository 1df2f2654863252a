from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect
from django.urls import reverse

from production_line.models import RollStatus, Stage
from production_line.utils import get_user_role, role_to_stage

# Operators land on the queue of rolls waiting for their stage.
STAGE_QUEUES = {
    Stage.PRINTING: RollStatus.FOR_PRINTING,
    Stage.CUTTING: RollStatus.FOR_CUTTING,
    Stage.RECEIVING: RollStatus.FOR_RECEIVING,
}


@login_required
def dashboard_view(request):
    queue = STAGE_QUEUES.get(role_to_stage(get_user_role(request.user)))
    if queue is not None:
        return redirect(reverse('production_line:rolls_by_status', kwargs={'status': queue}))
    # Managers, accountants and extruders start from the job order list
    return redirect('job_orders:job_order_list')
